"""
validator.py - recursive validation / coercion engine
=====================================================

Walks a compiled :class:`~contract_model.type_schema.TypeSchemaNode` against
an arbitrary value, returning the (possibly coerced) value or :data:`INVALID`
after recording at least one error in the supplied collector.  Nothing in
this module raises for bad input; failures go to the collector.

Public API
----------
INVALID
    Sentinel returned when the value could not be validated.

validate_and_convert(value, node, errors, path, deserializers=None)
    Dispatch, first match wins:

    1. ``None`` against an optional union      -> ``None``
    2. ``Any`` / unbound type variable         -> value unchanged
    3. record type and a mapping value         -> nested record construction
    4. ``LIST`` / 5. ``DICT`` / 6. ``TUPLE`` / 7. ``SET`` -> element-wise
    8. plain type                              -> instance check, registered
       deserializer, primitive coercion, constructor fallback
    9. ``UNION``                               -> exact pass, then coercion pass
    10. any other generic                      -> origin constructor
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from .collector import ErrorCollector
from .deserializer import GLOBAL_DESERIALIZERS, DeserializerRegistry
from .errors import (
    ValidationError,
    container_shape_message,
    nested_failure_message,
    tuple_length_message,
    type_mismatch_message,
    union_no_match_message,
)
from .type_schema import ContainerKind, TypeSchemaNode
from .utils import _is_instance

__all__ = ["INVALID", "validate_and_convert"]

logger = logging.getLogger(__name__)


class _Invalid:
    def __repr__(self) -> str:
        return "INVALID"

    def __bool__(self) -> bool:
        return False


INVALID = _Invalid()

_PRIMITIVES = (int, str, float, bool)
_SEQUENCE_INPUTS = (list, tuple)
_SET_INPUTS = (set, frozenset, list, tuple)


def _child(path: str, key: Any) -> str:
    return f"{path}.{key}" if path else str(key)


# --------------------------------------------------------------------------- #
# Entry point                                                                 #
# --------------------------------------------------------------------------- #

def validate_and_convert(
    value: Any,
    node: TypeSchemaNode,
    errors: ErrorCollector,
    path: str,
    deserializers: Optional[DeserializerRegistry] = None,
) -> Any:
    if deserializers is None:
        deserializers = GLOBAL_DESERIALIZERS

    if value is None and node.is_optional:
        return None
    if node.is_any:
        return value
    if node.is_record_type and isinstance(value, Mapping):
        return _build_record(node.declared_type, value, errors, path)

    kind = node.container_kind
    if kind is ContainerKind.LIST:
        return _validate_list(value, node, errors, path, deserializers)
    if kind is ContainerKind.DICT:
        return _validate_dict(value, node, errors, path, deserializers)
    if kind is ContainerKind.TUPLE:
        return _validate_tuple(value, node, errors, path, deserializers)
    if kind is ContainerKind.SET:
        return _validate_set(value, node, errors, path, deserializers)
    if node.origin is None:
        return _validate_plain(value, node, errors, path, deserializers)
    if kind is ContainerKind.UNION:
        return _validate_union(value, node, errors, path, deserializers)
    return _validate_generic(value, node, errors, path)


# --------------------------------------------------------------------------- #
# Records                                                                     #
# --------------------------------------------------------------------------- #

def _build_record(record_type: type, mapping: Mapping, errors: ErrorCollector, path: str) -> Any:
    try:
        return record_type.from_dict(mapping)
    except ValidationError as exc:
        errors.add_suberror(path, exc.errors)
    except Exception as exc:
        errors.add_error(path, nested_failure_message(exc))
    return INVALID


# --------------------------------------------------------------------------- #
# Containers                                                                  #
# --------------------------------------------------------------------------- #

def _element(value: Any, node: TypeSchemaNode, record: Optional[type], errors, path, deserializers) -> Any:
    if record is not None and isinstance(value, Mapping):
        return _build_record(record, value, errors, path)
    return validate_and_convert(value, node, errors, path, deserializers)


def _validate_list(value, node, errors, path, deserializers):
    if not isinstance(value, _SEQUENCE_INPUTS):
        errors.add_error(path, container_shape_message("list", value))
        return INVALID
    item_node, record = node.args[0], node.inner_record_type
    out = []
    failed = False
    for idx, item in enumerate(value):
        conv = _element(item, item_node, record, errors, _child(path, idx), deserializers)
        if conv is INVALID:
            failed = True
        else:
            out.append(conv)
    return INVALID if failed else out


def _validate_dict(value, node, errors, path, deserializers):
    if not isinstance(value, Mapping):
        errors.add_error(path, container_shape_message("dict", value))
        return INVALID
    key_node, val_node = node.args
    record = node.inner_record_type
    out = {}
    failed = False
    for key, item in value.items():
        sub_path = _child(path, key)
        conv_key = validate_and_convert(key, key_node, errors, sub_path, deserializers)
        conv_val = _element(item, val_node, record, errors, sub_path, deserializers)
        if conv_key is INVALID or conv_val is INVALID:
            failed = True
        else:
            out[conv_key] = conv_val
    return INVALID if failed else out


def _validate_tuple(value, node, errors, path, deserializers):
    if not isinstance(value, _SEQUENCE_INPUTS):
        errors.add_error(path, container_shape_message("tuple", value))
        return INVALID
    if node.variadic:
        positions = [node.args[0]] * len(value)
    else:
        positions = list(node.args)
        if len(value) != len(positions):
            errors.add_error(path, tuple_length_message(len(positions), len(value)))
            return INVALID
    record = node.inner_record_type
    out = []
    failed = False
    for idx, (item, item_node) in enumerate(zip(value, positions)):
        conv = _element(item, item_node, record, errors, _child(path, idx), deserializers)
        if conv is INVALID:
            failed = True
        else:
            out.append(conv)
    return INVALID if failed else tuple(out)


def _validate_set(value, node, errors, path, deserializers):
    if not isinstance(value, _SET_INPUTS):
        errors.add_error(path, container_shape_message("set", value))
        return INVALID
    item_node, record = node.args[0], node.inner_record_type
    out = set()
    failed = False
    for idx, item in enumerate(value):
        conv = _element(item, item_node, record, errors, _child(path, idx), deserializers)
        if conv is INVALID:
            failed = True
            continue
        try:
            out.add(conv)
        except TypeError:
            errors.add_error(_child(path, idx), type_mismatch_message("hashable", conv))
            failed = True
    return INVALID if failed else out


# --------------------------------------------------------------------------- #
# Plain values                                                                #
# --------------------------------------------------------------------------- #

def _validate_plain(value, node, errors, path, deserializers):
    declared = node.declared_type
    if _is_instance(value, declared):
        return value

    fn = deserializers.lookup(declared, type(value))
    if fn is not None:
        try:
            result = fn(value)
        except Exception as exc:
            logger.debug("Deserializer for %s failed at %s: %s", node.display_repr, path, exc)
        else:
            if _is_instance(result, declared):
                return result
            logger.debug("Deserializer for %s returned %s at %s; ignored",
                         node.display_repr, type(result).__name__, path)

    if declared in _PRIMITIVES:
        return _coerce_primitive(value, declared, errors, path)
    return _construct(value, declared, node.display_repr, errors, path)


def _coerce_primitive(value, kind: type, errors, path):
    try:
        conv = kind(value)
    except Exception:
        conv = INVALID
    if conv is not INVALID and isinstance(conv, kind):
        return conv
    errors.add_error(path, type_mismatch_message(kind.__name__, value))
    return INVALID


def _construct(value, declared, display, errors, path):
    try:
        conv = declared(value)
    except Exception:
        conv = INVALID
    if conv is not INVALID and _is_instance(conv, declared):
        return conv
    errors.add_error(path, type_mismatch_message(display, value))
    return INVALID


def _validate_generic(value, node, errors, path):
    origin = node.origin
    if _is_instance(value, origin):
        return value
    return _construct(value, origin, node.display_repr, errors, path)


# --------------------------------------------------------------------------- #
# Unions                                                                      #
# --------------------------------------------------------------------------- #

def _validate_union(value, node, errors, path, deserializers):
    for alt in node.args:
        target = alt.origin if alt.origin is not None else alt.declared_type
        if alt.is_any or _is_instance(value, target):
            return value

    logger.debug("No exact Union match for %s at %s; trying coercion", type(value).__name__, path)
    for alt in node.args:
        scratch = ErrorCollector()
        conv = validate_and_convert(value, alt, scratch, path, deserializers)
        if conv is not INVALID and not scratch.has_errors():
            return conv

    errors.add_error(path, union_no_match_message(value))
    return INVALID
