"""Scalar type table: native types to spec type/format and value coercion."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from pydantic import BaseModel

from ..config import Settings, get_settings
from ..meta.base import PropertyNode

INT32_RANGE = (-(2**31), 2**31 - 1)
INT64_RANGE = (-(2**63), 2**63 - 1)

DEFAULT_DATE = datetime(2000, 1, 1)

Coerce = Callable[[PropertyNode, Any], Any]


class SpecDataType(BaseModel):
    type: str
    format: str | None = None
    coerce: Coerce

    def fragment(self) -> dict:
        result = {"type": self.type}
        if self.format:
            result["format"] = self.format
        return result


def _to_integer(bounds: tuple[int, int]) -> Coerce:
    def coerce(node: PropertyNode, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValueError(f"not an integer: {value!r}")
        number = value if isinstance(value, int) else int(str(value).strip())
        if not bounds[0] <= number <= bounds[1]:
            raise ValueError(f"out of range: {number}")
        return number

    return coerce


def _to_boolean(node: PropertyNode, value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text not in ("true", "false"):
        raise ValueError(f"not a boolean: {value!r}")
    return text == "true"


def _to_float(node: PropertyNode, value: Any) -> Any:
    if value is None:
        return None
    return float(value)


def _to_decimal(node: PropertyNode, value: Any) -> Any:
    if value is None:
        return None
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"not a decimal: {value!r}") from e


def _as_is(node: PropertyNode, value: Any) -> Any:
    return value


def format_datetime(value: datetime, pattern: str) -> str:
    """strftime with ``%L`` standing for zero-padded milliseconds."""
    return value.strftime(pattern.replace("%L", f"{value.microsecond // 1000:03d}"))


class ScalarTypeTable:
    """Lookup of scalar keys (see ``meta.walker.SCALAR_TYPES``) to SpecDataType."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.types = self.create_type_map()

    def create_type_map(self) -> dict[str, SpecDataType]:
        return {
            "bool": SpecDataType(type="boolean", coerce=_to_boolean),
            "int": SpecDataType(type="integer", format="int32", coerce=_to_integer(INT32_RANGE)),
            "Int64": SpecDataType(type="integer", format="int64", coerce=_to_integer(INT64_RANGE)),
            "Float32": SpecDataType(type="number", format="float", coerce=_to_float),
            "float": SpecDataType(type="number", format="double", coerce=_to_float),
            "Decimal": SpecDataType(type="number", format="double", coerce=_to_decimal),
            "str": SpecDataType(type="string", coerce=_as_is),
            "bytes": SpecDataType(type="string", format="byte", coerce=_as_is),
            "date": SpecDataType(type="string", format="date", coerce=self._date_coerce(self.settings.date_pattern)),
            "datetime": SpecDataType(
                type="string", format="date-time", coerce=self._date_coerce(self.settings.datetime_pattern)
            ),
            "time": SpecDataType(type="string", coerce=self._date_coerce(self.settings.time_pattern)),
            "FormFile": SpecDataType(type="file", coerce=_as_is),
        }

    def _date_coerce(self, default_pattern: str) -> Coerce:
        def coerce(node: PropertyNode, value: Any) -> Any:
            if value is not None:
                return value
            marker = node.find_marker("JsonDatePattern")
            pattern = marker.attributes["value"] if marker else default_pattern
            return format_datetime(DEFAULT_DATE, pattern)

        return coerce

    def get(self, key: str | None) -> SpecDataType | None:
        if key is None:
            return None
        return self.types.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self.types
