"""Data models for analyzed type graphs and endpoints.

The walker produces PropertyNode trees; the endpoint analyzer wraps them
into Endpoint models for the assembler.
"""

import re
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

EXAMPLE_MARKER = "e.g."

_FIELD_DESCRIPTION_PATTERN = re.compile(r"([^.。*]+)")
_EXAMPLE_PLACEHOLDER = "\x00edotgdot\x00"


class Marker(BaseModel):
    """A constraint tag attached to a declaration, e.g. Required or Length."""

    name: str
    attributes: dict[str, Any] = {}


class EnumCandidate(BaseModel):
    code: str
    name: str
    alias: str = ""


class ScalarType(BaseModel):
    kind: Literal["scalar"] = "scalar"
    scalar: str  # key of the scalar type table, e.g. "int", "date"


class ArrayType(BaseModel):
    kind: Literal["array"] = "array"
    element: "DeclaredType"


class MapType(BaseModel):
    kind: Literal["map"] = "map"
    key_type: str | None = None
    value_type: str | None = None


class EnumType(BaseModel):
    kind: Literal["enum"] = "enum"
    title: str
    candidates: list[EnumCandidate] = []


class ReferenceType(BaseModel):
    kind: Literal["reference"] = "reference"
    type_id: str


class OpaqueType(BaseModel):
    kind: Literal["object"] = "object"


DeclaredType = Annotated[
    Union[ScalarType, ArrayType, MapType, EnumType, ReferenceType, OpaqueType],
    Field(discriminator="kind"),
]

ArrayType.model_rebuild()


class PropertyNode(BaseModel):
    """One property, parameter or root type occurrence in a type graph."""

    name: str = ""
    public_name: str = ""
    type_name: str = ""
    simple_type_name: str = ""
    declared_type: DeclaredType = Field(default_factory=OpaqueType)
    generic_type: DeclaredType | None = None
    markers: list[Marker] = []
    documentation: str | None = None
    value_expression: str | None = None
    optional: bool = False
    children: list["PropertyNode"] = []

    @property
    def kind(self) -> str:
        return self.declared_type.kind

    @property
    def description(self) -> str | None:
        """First sentence of the documentation, keeping any e.g. inside it."""
        if not self.documentation:
            return None
        protected = self.documentation.replace(EXAMPLE_MARKER, _EXAMPLE_PLACEHOLDER)
        match = _FIELD_DESCRIPTION_PATTERN.match(protected)
        if not match:
            return None
        description = match.group(1).strip().replace(_EXAMPLE_PLACEHOLDER, EXAMPLE_MARKER)
        return description or None

    @property
    def example_expression(self) -> str | None:
        if not self.documentation or EXAMPLE_MARKER not in self.documentation:
            return None
        rear = self.documentation.split(EXAMPLE_MARKER, 1)[1].strip()
        return rear or None

    def has_marker(self, *names: str) -> bool:
        return any(m.name in names for m in self.markers)

    def find_marker(self, name: str) -> Marker | None:
        for marker in self.markers:
            if marker.name == name:
                return marker
        return None


class EndpointDescriptor(BaseModel):
    """Declared metadata of one endpoint, supplied by the hosting application."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    url: str
    http_method: str | None = None
    method_name: str = "index"
    path_parameters: list[tuple[str, Any]] = []
    form_type: Any = None
    response_type: Any = None
    success_status: int | None = None
    success_description: str | None = None
    failure_statuses: dict[int, list[str]] = {}
    doc: str | None = None
    type_doc: str | None = None
    root: bool = False


class Endpoint(BaseModel):
    """One analyzed operation, ready for assembling."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    url: str
    method_name: str = "index"
    http_method: str | None = None
    tag: str = ""
    description: str | None = None
    method_comment: str | None = None
    path_parameters: list[PropertyNode] = []
    request_form: PropertyNode | None = None
    response: PropertyNode
    response_kind: str = "void"  # json / xml / html / stream / plain / void
    success_status: int | None = None
    success_description: str | None = None
    failure_status_map: dict[int, list[str]] = {}
    descriptor: EndpointDescriptor | None = None

    @property
    def structured_failure(self) -> bool:
        return self.response_kind in ("json", "xml")
