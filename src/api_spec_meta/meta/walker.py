"""Type graph walker.

Expands a declared type into a bounded-depth tree of PropertyNode. Cycles
terminate because every nested level consumes one unit of depth.
"""

import enum
import inspect
import logging
import typing
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, ClassVar, NamedTuple, TypeVar

from pydantic import BaseModel

from ..config import Settings, get_settings
from .base import (
    ArrayType,
    EnumCandidate,
    EnumType,
    MapType,
    OpaqueType,
    PropertyNode,
    ReferenceType,
    ScalarType,
)
from .docs import DocLookup, SourceDocLookup
from .markers import arrange_markers
from .naming import NamingPolicy, identity
from .responses import Float32, FormFile, Int64, unwrap_response
from .typenames import (
    first_arg,
    is_mapping,
    is_sequence,
    origin_and_args,
    simple_type_name,
    strip_annotated,
    type_name,
    unwrap_optional,
)

logger = logging.getLogger(__name__)

SCALAR_TYPES = {
    bool: "bool",
    int: "int",
    Int64: "Int64",
    Float32: "Float32",
    float: "float",
    Decimal: "Decimal",
    str: "str",
    bytes: "bytes",
    date: "date",
    datetime: "datetime",
    time: "time",
    FormFile: "FormFile",
}


def scalar_key(tp) -> str | None:
    try:
        return SCALAR_TYPES.get(tp)
    except TypeError:  # unhashable annotation
        return None


def is_enum(tp) -> bool:
    return isinstance(tp, type) and issubclass(tp, enum.Enum)


class Member(NamedTuple):
    """One declared property of a type."""

    name: str
    annotation: Any
    owner: type
    metadata: tuple = ()
    alias: str | None = None


class PythonTypeDescriptor:
    """Enumerates members of pydantic models, dataclasses and annotated classes.

    Members are listed base classes first; class variables and private names
    are skipped.
    """

    def members(self, tp) -> list[Member]:
        cls = _class_of(tp)
        if cls is None:
            return []
        if issubclass(cls, BaseModel):
            return self._model_members(cls)
        return self._annotated_members(cls)

    def _model_members(self, cls: type[BaseModel]) -> list[Member]:
        members = []
        for name, field in cls.model_fields.items():
            if name.startswith("_"):
                continue
            members.append(
                Member(
                    name=name,
                    annotation=field.annotation,
                    owner=_declaring_class(cls, name),
                    metadata=tuple(field.metadata),
                    alias=field.alias,
                )
            )
        return members

    def _annotated_members(self, cls: type) -> list[Member]:
        hints = typing.get_type_hints(cls, include_extras=True)
        members = []
        seen: set[str] = set()
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            for name in inspect.get_annotations(klass):
                if name in seen or name.startswith("_") or name not in hints:
                    continue
                seen.add(name)
                hint = hints[name]
                bare, _ = strip_annotated(hint)
                if bare is ClassVar or typing.get_origin(bare) is ClassVar:
                    continue
                members.append(Member(name=name, annotation=hint, owner=klass))
        return members


class RegistryTypeDescriptor:
    """Serves pre-built member lists, falling back to another descriptor."""

    def __init__(self, registry: dict[type, list[Member]], fallback=None):
        self.registry = registry
        self.fallback = fallback if fallback is not None else PythonTypeDescriptor()

    def members(self, tp) -> list[Member]:
        cls = _class_of(tp)
        if cls in self.registry:
            return list(self.registry[cls])
        return self.fallback.members(tp)


def _class_of(tp) -> type | None:
    tp, _ = strip_annotated(tp)
    origin, _ = origin_and_args(tp)
    cls = origin if origin is not None else tp
    if cls is Any or cls is object or not isinstance(cls, type):
        return None
    return cls


def _declaring_class(cls: type, name: str) -> type:
    for klass in reversed(cls.__mro__):
        if name in inspect.get_annotations(klass):
            return klass
    return cls


class TypeGraphWalker:
    """Walks declared types into PropertyNode trees."""

    def __init__(
        self,
        settings: Settings | None = None,
        doc_lookup: DocLookup | None = None,
        naming: NamingPolicy = identity,
        descriptor=None,
    ):
        self.settings = settings or get_settings()
        self.doc_lookup = doc_lookup if doc_lookup is not None else SourceDocLookup()
        self.naming = naming
        self.descriptor = descriptor if descriptor is not None else PythonTypeDescriptor()
        self.nested_suffixes = tuple(self.settings.nested_suffixes)

    @property
    def depth(self) -> int:
        return self.settings.depth

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------

    def expand(self, tp, depth: int, bindings: dict[str, Any] | None = None) -> list[PropertyNode]:
        """Properties of ``tp``, recursing into nested types while depth lasts."""
        if depth < 0:
            return []
        bindings = bindings or {}
        try:
            members = self.descriptor.members(tp)
        except Exception as e:
            logger.warning("Cannot enumerate the members of %s: %s", type_name(tp), e)
            return []

        form = self.is_form(tp)
        nodes = []
        for member in members:
            try:
                nodes.append(self._member_node(member, depth, bindings, form))
            except Exception as e:
                logger.warning(
                    "Cannot analyze %s.%s, treated as an opaque property: %s", type_name(tp), member.name, e
                )
                nodes.append(PropertyNode(name=member.name, public_name=member.name, type_name="Any", simple_type_name="Any"))
        return nodes

    def _member_node(self, member: Member, depth: int, bindings: dict, form: bool) -> PropertyNode:
        annotation, metadata = strip_annotated(member.annotation)
        annotation, optional = unwrap_optional(annotation)
        annotation, more = strip_annotated(annotation)
        metadata = tuple(member.metadata) + metadata + more

        resolved = self.resolve(annotation, bindings)
        node = self.leaf(member.name, resolved, metadata, optional)
        if member.alias:
            node.public_name = member.alias
        else:
            node.public_name = member.name if form else self.naming(member.name)
        node.documentation = self.doc_lookup(member.owner, member.name)

        target = self.expansion_target(annotation, bindings)
        if target is not None:
            node.children = self.expand(target, depth - 1, bindings)
        return node

    def leaf(self, name: str, tp, metadata: tuple = (), optional: bool = False) -> PropertyNode:
        """A node describing ``tp`` without children."""
        tp_name = type_name(tp)
        node = PropertyNode(
            name=name,
            public_name=name,
            type_name=tp_name,
            simple_type_name=simple_type_name(tp_name),
            declared_type=self.declare(tp),
            markers=arrange_markers(metadata),
            optional=optional,
        )
        _, args = origin_and_args(tp)
        if args:
            node.generic_type = self.declare(args[-1] if is_mapping(tp) else args[0])
        node.value_expression = _enum_expression(tp)
        return node

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def declare(self, tp):
        """Declared type variant of an annotation."""
        tp, _ = strip_annotated(tp)
        tp, _ = unwrap_optional(tp)
        tp, _ = strip_annotated(tp)
        if tp is Any or tp is object or isinstance(tp, TypeVar):
            return OpaqueType()
        key = scalar_key(tp)
        if key:
            return ScalarType(scalar=key)
        if is_sequence(tp):
            element = first_arg(tp)
            return ArrayType(element=self.declare(element) if element is not None else OpaqueType())
        if is_mapping(tp):
            _, args = origin_and_args(tp)
            if len(args) == 2:
                return MapType(key_type=type_name(args[0]), value_type=type_name(args[1]))
            return MapType()
        if is_enum(tp):
            return EnumType(title=_enum_title(tp), candidates=enum_candidates(tp))
        if _class_of(tp) is not None:
            return ReferenceType(type_id=type_name(tp))
        return OpaqueType()

    def is_native(self, tp) -> bool:
        tp, _ = strip_annotated(tp)
        if scalar_key(tp) or is_enum(tp) or is_mapping(tp) or is_sequence(tp):
            return True
        return _class_of(tp) is None or tp is object

    def is_form(self, tp) -> bool:
        cls = _class_of(tp)
        return cls is not None and cls.__name__.endswith("Form")

    def has_nested_name(self, tp) -> bool:
        cls = _class_of(tp)
        if cls is None or is_enum(cls):
            return False
        qualname = cls.__qualname__.replace(".<locals>", "")
        return any(qualname.endswith(s) or f"{s}." in qualname for s in self.nested_suffixes)

    def expansion_target(self, tp, bindings: dict):
        """The type whose properties become the children of ``tp``, or None for a leaf."""
        tp, _ = strip_annotated(tp)
        if isinstance(tp, TypeVar):
            bound = bindings.get(tp.__name__)
            if bound is None:
                return None
            return self.expansion_target(bound, bindings)
        if self.has_nested_name(tp):
            return tp
        if not is_sequence(tp) and not is_mapping(tp) and _class_of(tp) is not None:
            arg = first_arg(tp)
            if isinstance(arg, TypeVar) and arg.__name__ in bindings:
                return tp

        element = first_arg(tp)
        while element is not None and is_sequence(element):
            element = first_arg(element)
        if element is None:
            return None
        element, _ = strip_annotated(element)
        element, _ = unwrap_optional(element)
        if isinstance(element, TypeVar):
            element = bindings.get(element.__name__)
        if element is not None and self.has_nested_name(element):
            return element
        return None

    def resolve(self, tp, bindings: dict):
        """Substitute bound type variables inside ``tp``."""
        if isinstance(tp, TypeVar):
            return bindings.get(tp.__name__, tp)
        origin, args = origin_and_args(tp)
        if origin is None or not args or not bindings:
            return tp
        resolved = tuple(self.resolve(a, bindings) for a in args)
        if resolved == args:
            return tp
        try:
            return origin[resolved if len(resolved) > 1 else resolved[0]]
        except TypeError:
            return tp

    # ------------------------------------------------------------------
    # Roots
    # ------------------------------------------------------------------

    def bindings_of(self, tp) -> dict[str, Any]:
        origin, args = origin_and_args(tp)
        if origin is None:
            return {}
        meta = getattr(origin, "__pydantic_generic_metadata__", None)
        params = (meta or {}).get("parameters") or getattr(origin, "__parameters__", ())
        return {p.__name__: a for p, a in zip(params, args)}

    def analyze_return(self, response_type) -> PropertyNode:
        """Root node of an action response, expanded when the target is a class."""
        target, kind = unwrap_response(response_type)
        if target is None:
            return PropertyNode(name="response", public_name="response", type_name="void", simple_type_name="void")
        target, _ = strip_annotated(target)
        target, _ = unwrap_optional(target)

        node = self.leaf("response", target)
        if kind in ("json", "xml") and not is_sequence(target):
            # JsonResponse<Page<X>>: the definition name drops the wrapper
            origin = origin_and_args(response_type)[0] or response_type
            node.type_name = f"{type_name(origin)}<{node.type_name}>"
            node.simple_type_name = simple_type_name(node.type_name)
        element = target
        while is_sequence(element):
            element = first_arg(element)
            if element is None:
                return node
        if not self.is_native(element):
            node.children = self.expand(element, self.depth, self.bindings_of(element))
        return node

    def analyze_form(self, form_type) -> PropertyNode:
        form_type, _ = strip_annotated(form_type)
        node = self.leaf("form", form_type)
        element = form_type
        while is_sequence(element):
            element = first_arg(element)
        if element is not None and not self.is_native(element):
            node.children = self.expand(element, self.depth, {})
        return node

    def analyze_parameter(self, name: str, annotation) -> PropertyNode:
        annotation, metadata = strip_annotated(annotation)
        annotation, optional = unwrap_optional(annotation)
        annotation, more = strip_annotated(annotation)
        return self.leaf(name, annotation, metadata + more, optional)


def enum_candidates(enum_cls) -> list[EnumCandidate]:
    candidates = []
    for member in enum_cls:
        code = member.value if isinstance(member.value, str) else member.name
        alias = getattr(member, "alias", "")
        candidates.append(EnumCandidate(code=code, name=member.name, alias=alias if isinstance(alias, str) else ""))
    return candidates


def _enum_title(enum_cls) -> str:
    return enum_cls.__qualname__.replace(".<locals>", "")


def _enum_expression(tp) -> str | None:
    element = tp
    while is_sequence(element):
        element = first_arg(element)
    if not is_enum(element):
        return None
    return "[" + ", ".join(c.code for c in enum_candidates(element)) + "]"
