"""Declaration markers, used as ``typing.Annotated`` metadata.

    class SeaBody:
        sea_name: Annotated[str, Required(), Length(max=20)]

Markers are plain objects so pydantic models can carry them as field
metadata; the walker turns them into Marker records.
"""

from annotated_types import Ge, Le, MaxLen, MinLen

from .base import Marker

REQUIRED_MARKER_NAMES = ("Required", "NotNull", "NotEmpty")

INT_MAX = 2147483647


class MarkerTag:
    """Base of all declaration markers; the marker name is the class name."""

    def __init__(self, **attributes):
        self.attributes = attributes

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_marker(self) -> Marker:
        return Marker(name=self.name, attributes=dict(self.attributes))

    def __repr__(self):
        args = ", ".join(f"{k}={v!r}" for k, v in self.attributes.items())
        return f"{self.name}({args})"


class Required(MarkerTag):
    pass


class NotNull(MarkerTag):
    pass


class NotEmpty(MarkerTag):
    pass


class Length(MarkerTag):
    def __init__(self, min: int = 0, max: int = INT_MAX):
        super().__init__(min=min, max=max)


class Size(MarkerTag):
    def __init__(self, min: int = 0, max: int = INT_MAX):
        super().__init__(min=min, max=max)


class Min(MarkerTag):
    def __init__(self, value: int):
        super().__init__(value=value)


class Max(MarkerTag):
    def __init__(self, value: int):
        super().__init__(value=value)


class Pattern(MarkerTag):
    def __init__(self, regexp: str):
        super().__init__(regexp=regexp)


class Email(MarkerTag):
    def __init__(self, regexp: str = ".*"):
        super().__init__(regexp=regexp)


class JsonDatePattern(MarkerTag):
    def __init__(self, value: str):
        super().__init__(value=value)


class JsonParameter(MarkerTag):
    """The property travels as a JSON string inside a form."""


def arrange_markers(metadata) -> list[Marker]:
    """Collect markers from annotation metadata.

    pydantic constraints (``Field(min_length=...)``, ``ge``, ``le``) are
    translated into the equivalent Length/Min/Max markers.
    """
    markers: list[Marker] = []
    length: dict = {}
    for meta in metadata:
        if isinstance(meta, Marker):
            markers.append(meta)
        elif isinstance(meta, MarkerTag):
            markers.append(meta.to_marker())
        elif isinstance(meta, MinLen):
            length["min"] = meta.min_length
        elif isinstance(meta, MaxLen):
            length["max"] = meta.max_length
        elif isinstance(meta, Ge):
            markers.append(Min(meta.ge).to_marker())
        elif isinstance(meta, Le):
            markers.append(Max(meta.le).to_marker())
    if length:
        markers.append(Length(min=length.get("min", 0), max=length.get("max", INT_MAX)).to_marker())
    return markers
