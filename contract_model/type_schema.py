"""
type_schema.py - declared type -> compiled schema node
======================================================

Public API
----------
ContainerKind
    Closed classification of a node: ``NONE`` (plain / opaque), ``LIST``,
    ``DICT``, ``TUPLE``, ``SET`` or ``UNION``.

TypeSchemaNode
    Compiled, read-only description of one declared type position.

compile_type_schema(declared_type) -> TypeSchemaNode
    Compile (or fetch from the process-wide cache) the node for a type.
    Irregular shapes never raise; they degrade to an opaque node.

Nested record types compile to leaf nodes flagged ``is_record_type``; their
fields are compiled separately (and lazily) by :mod:`.model_schema`, so a
record that refers to itself never makes this compiler recurse.
"""

from __future__ import annotations

import logging
import threading
import types
import typing
from enum import Enum
from typing import Any, Dict, Optional, Tuple, TypeVar, get_args, get_origin

from .reflection import is_record_type
from .utils import _type_name

__all__ = ["ContainerKind", "TypeSchemaNode", "compile_type_schema", "clear_type_cache"]

logger = logging.getLogger(__name__)

_UNION_ORIGINS = tuple(o for o in (typing.Union, getattr(types, "UnionType", None)) if o is not None)
_NONE_TYPE = type(None)


class ContainerKind(Enum):
    NONE = "none"
    LIST = "list"
    DICT = "dict"
    TUPLE = "tuple"
    SET = "set"
    UNION = "union"


_FAMILIES: Dict[Any, ContainerKind] = {
    list: ContainerKind.LIST,
    dict: ContainerKind.DICT,
    tuple: ContainerKind.TUPLE,
    set: ContainerKind.SET,
}
_FAMILIES.update({o: ContainerKind.UNION for o in _UNION_ORIGINS})


class TypeSchemaNode:
    """One compiled type position.

    ``origin`` is the runtime generic origin (``list``, ``dict``, ...,
    ``typing.Union``) or ``None`` for plain types.  ``args`` is empty unless
    ``container_kind`` is not ``NONE``.  ``variadic`` marks ``Tuple[X, ...]``.
    """

    __slots__ = (
        "declared_type",
        "origin",
        "args",
        "container_kind",
        "is_optional",
        "is_record_type",
        "inner_record_type",
        "is_any",
        "variadic",
        "display_repr",
    )

    def __init__(
        self,
        declared_type: Any,
        *,
        origin: Any = None,
        args: Tuple["TypeSchemaNode", ...] = (),
        container_kind: ContainerKind = ContainerKind.NONE,
        is_optional: bool = False,
        record: bool = False,
        inner_record_type: Optional[type] = None,
        is_any: bool = False,
        variadic: bool = False,
    ):
        self.declared_type = declared_type
        self.origin = origin
        self.args = args
        self.container_kind = container_kind
        self.is_optional = is_optional
        self.is_record_type = record
        self.inner_record_type = inner_record_type
        self.is_any = is_any
        self.variadic = variadic
        self.display_repr = _type_name(declared_type)

    def __repr__(self) -> str:
        return f"<TypeSchemaNode {self.display_repr} kind={self.container_kind.name}>"


# --------------------------------------------------------------------------- #
# Cache                                                                       #
# --------------------------------------------------------------------------- #

_CACHE: Dict[Any, TypeSchemaNode] = {}
_LOCK = threading.Lock()


def _cache_key(tp: Any) -> Any:
    """Structural, order-preserving key (``Union[int, str]`` != ``Union[str, int]``)."""
    origin = get_origin(tp)
    if origin is None:
        if isinstance(tp, type):
            return tp
        try:
            hash(tp)
        except TypeError:
            return ("id", id(tp))
        return (type(tp), tp)
    return (origin, tuple(_cache_key(a) for a in get_args(tp)))


def clear_type_cache() -> None:
    """Drop every compiled node (test isolation helper)."""
    with _LOCK:
        _CACHE.clear()


def compile_type_schema(declared_type: Any) -> TypeSchemaNode:
    key = _cache_key(declared_type)
    node = _CACHE.get(key)
    if node is not None:
        return node

    node = _build(declared_type)
    with _LOCK:
        published = _CACHE.setdefault(key, node)
    if published is not node:
        logger.debug("Discarding concurrently compiled node for %s", node.display_repr)
    else:
        logger.debug("Compiled %r", node)
    return published


# --------------------------------------------------------------------------- #
# Compilation                                                                 #
# --------------------------------------------------------------------------- #

def _build(tp: Any) -> TypeSchemaNode:
    if tp is Any or isinstance(tp, TypeVar):
        return TypeSchemaNode(tp, is_any=True)
    if is_record_type(tp):
        return TypeSchemaNode(tp, record=True)

    origin = get_origin(tp)
    if origin is None:
        return TypeSchemaNode(tp)
    if origin is typing.Annotated:
        return compile_type_schema(get_args(tp)[0])

    raw_args = get_args(tp)
    kind = _FAMILIES.get(origin, ContainerKind.NONE)
    variadic = False

    if kind is ContainerKind.TUPLE and len(raw_args) == 2 and raw_args[1] is Ellipsis:
        raw_args, variadic = raw_args[:1], True
    if not _arity_ok(kind, raw_args):
        return TypeSchemaNode(tp, origin=origin)

    args = tuple(compile_type_schema(a) for a in raw_args)

    if kind is ContainerKind.UNION:
        non_null = [a for a in args if a.declared_type is not _NONE_TYPE]
        records = [a.declared_type for a in non_null if a.is_record_type]
        return TypeSchemaNode(
            tp,
            origin=origin,
            args=args,
            container_kind=kind,
            is_optional=len(non_null) != len(args),
            inner_record_type=records[0] if len(records) == 1 else None,
        )

    element = args[-1]
    inner = element.declared_type if element.is_record_type and (variadic or kind is not ContainerKind.TUPLE) else None
    return TypeSchemaNode(
        tp,
        origin=origin,
        args=args,
        container_kind=kind,
        inner_record_type=inner,
        variadic=variadic,
    )


def _arity_ok(kind: ContainerKind, raw_args: Tuple[Any, ...]) -> bool:
    if kind is ContainerKind.NONE:
        return False
    if kind is ContainerKind.DICT:
        return len(raw_args) == 2
    if kind in (ContainerKind.LIST, ContainerKind.SET):
        return len(raw_args) == 1
    return len(raw_args) >= 1
