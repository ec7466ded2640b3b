"""Type name rendering and small typing helpers.

Names use angle-bracket generics so that every generic instantiation gets
its own stable id, e.g. ``list<app.SeaBean>`` or ``app.Page<app.SeaBean>``.
"""

import collections.abc as cabc
import enum
import re
import types
import typing
from typing import Annotated, Any, ForwardRef, TypeVar, Union

SEQUENCE_ORIGINS = (
    list, tuple, set, frozenset,
    cabc.Sequence, cabc.MutableSequence, cabc.Iterable, cabc.Collection, cabc.Set, cabc.MutableSet,
)
MAPPING_ORIGINS = (dict, cabc.Mapping, cabc.MutableMapping)

_PACKAGE_PREFIX = re.compile(r"[a-z0-9_]+\.")


def strip_annotated(tp) -> tuple[Any, tuple]:
    """Split ``Annotated[X, m1, m2]`` into ``(X, (m1, m2))``."""
    metadata: tuple = ()
    while typing.get_origin(tp) is Annotated:
        metadata += tuple(tp.__metadata__)
        tp = tp.__origin__
    return tp, metadata


def unwrap_optional(tp) -> tuple[Any, bool]:
    """Return ``(X, True)`` for ``X | None``, else ``(tp, False)``."""
    if typing.get_origin(tp) in (Union, types.UnionType):
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1 and len(args) != len(typing.get_args(tp)):
            return args[0], True
    return tp, False


def origin_and_args(tp) -> tuple[Any, tuple]:
    """Generic origin and arguments, also for parametrized pydantic models."""
    meta = getattr(tp, "__pydantic_generic_metadata__", None)
    if meta and meta.get("origin") is not None:
        return meta["origin"], tuple(meta.get("args", ()))
    return typing.get_origin(tp), typing.get_args(tp)


def first_arg(tp):
    _, args = origin_and_args(tp)
    return args[0] if args else None


def is_new_type(tp) -> bool:
    return hasattr(tp, "__supertype__") and callable(tp)


def _container_class(tp) -> type | None:
    origin, _ = origin_and_args(tp)
    target = origin if origin is not None else tp
    return target if isinstance(target, type) else None


def is_sequence(tp) -> bool:
    # abstract origins match by identity only: pydantic models are iterable
    target = _container_class(tp)
    if target is None or issubclass(target, (str, bytes, enum.Enum)):
        return False
    return target in SEQUENCE_ORIGINS or issubclass(target, (list, tuple, set, frozenset))


def is_mapping(tp) -> bool:
    target = _container_class(tp)
    if target is None:
        return False
    return target in MAPPING_ORIGINS or issubclass(target, dict)


def _qualify(module: str | None, qualname: str) -> str:
    qualname = qualname.replace(".<locals>", "")
    if not module or module == "builtins":
        return qualname
    return f"{module}.{qualname}"


def type_name(tp) -> str:
    tp, _ = strip_annotated(tp)
    if tp is Any:
        return "Any"
    if tp is None or tp is type(None):
        return "None"
    if tp is Ellipsis:
        return "..."
    if isinstance(tp, TypeVar):
        return tp.__name__
    if isinstance(tp, ForwardRef):
        return tp.__forward_arg__
    if isinstance(tp, str):
        return tp
    if is_new_type(tp):
        return _qualify(getattr(tp, "__module__", None), tp.__name__)
    origin, args = origin_and_args(tp)
    if origin in (Union, types.UnionType):
        inner, optional = unwrap_optional(tp)
        if optional:
            return f"Optional<{type_name(inner)}>"
        return "Union<" + ", ".join(type_name(a) for a in args) + ">"
    if origin is not None:
        base = type_name(origin)
        if not args:
            return base
        return base + "<" + ", ".join(type_name(a) for a in args) + ">"
    if isinstance(tp, type):
        return _qualify(tp.__module__, tp.__qualname__)
    return repr(tp)


def simple_type_name(name: str) -> str:
    """Drop package qualifiers, e.g. ``app.web.SeaBean`` => ``SeaBean``."""
    return _PACKAGE_PREFIX.sub("", name)
