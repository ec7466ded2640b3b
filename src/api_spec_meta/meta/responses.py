"""Type handles used in endpoint declarations.

Response wrappers tell the assembler how an action responds; the extra scalar
types let a declaration ask for int64 or float32 formats.
"""

import typing
from typing import Generic, NewType, TypeVar

T = TypeVar("T")

Int64 = NewType("Int64", int)
Float32 = NewType("Float32", float)


class FormFile:
    """An uploaded multipart file."""


class ActionResponse(Generic[T]):
    pass


class ApiResponse(ActionResponse[T]):
    """Responses that carry structured failure entries."""


class JsonResponse(ApiResponse[T]):
    pass


class XmlResponse(ApiResponse[T]):
    pass


class HtmlResponse(ActionResponse[None]):
    pass


class StreamResponse(ActionResponse[None]):
    pass


PRODUCES = {
    JsonResponse: "application/json",
    XmlResponse: "application/xml",
    HtmlResponse: "text/html",
    StreamResponse: "application/octet-stream",
}

RESPONSE_KINDS = {
    JsonResponse: "json",
    XmlResponse: "xml",
    HtmlResponse: "html",
    StreamResponse: "stream",
}


def unwrap_response(response_type) -> tuple[object, str]:
    """Split a declared response into ``(target, kind)``.

    ``JsonResponse[SeaBean]`` => ``(SeaBean, "json")``. A bare type comes back
    as ``"plain"``.
    """
    if response_type is None or response_type is type(None):
        return None, "void"
    meta = getattr(response_type, "__pydantic_generic_metadata__", None)
    origin = typing.get_origin(response_type) or response_type
    args = typing.get_args(response_type)
    if meta and meta.get("origin") is not None:
        origin, args = meta["origin"], meta.get("args", ())
    if isinstance(origin, type):
        for wrapper, kind in RESPONSE_KINDS.items():
            if issubclass(origin, wrapper):
                if kind in ("html", "stream"):
                    return None, kind
                target = args[0] if args else None
                return (None if target is type(None) else target), kind
    return response_type, "plain"
