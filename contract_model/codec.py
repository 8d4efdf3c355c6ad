"""
codec.py - record <-> value tree <-> JSON text
==============================================

Public API
----------
to_value_tree(instance) -> dict
    Declared fields in declaration order.  Values whose exact runtime type has
    an entry in the active ``dict_serializer`` table are encoded by it (nested
    records included); other nested records switch to their own table.  Containers are rebuilt with the same
    container type; everything else passes through.

to_json_text(instance) -> str
    Same walk using ``json_serializer``; the result is rendered compactly
    with non-JSON leaves (datetimes, pandas objects, ...) made JSON-safe.

from_value_tree(record_type, mapping) -> record
from_json_text(record_type, text) -> record
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping

from .model_schema import compile_model_schema
from .parser import parse_json_text
from .reflection import is_record_type
from .utils import _dumps

__all__ = ["to_value_tree", "to_json_text", "from_value_tree", "from_json_text"]

Encoders = Mapping[type, Callable[[Any], Any]]


def _encode(value: Any, encoders: Encoders, table: str) -> Any:
    fn = encoders.get(type(value)) if encoders else None
    if fn is not None:
        result = fn(value)
        if result is not NotImplemented:
            return result

    if is_record_type(type(value)):
        return _walk(value, table)
    if isinstance(value, list):
        return [_encode(v, encoders, table) for v in value]
    if isinstance(value, tuple):
        return tuple(_encode(v, encoders, table) for v in value)
    if isinstance(value, dict):
        return {k: _encode(v, encoders, table) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return type(value)(_encode(v, encoders, table) for v in value)
    return value


def _walk(instance: Any, table: str) -> Dict[str, Any]:
    schema = compile_model_schema(type(instance))
    encoders = getattr(schema, table)
    store = instance.__dict__
    return {f.name: _encode(store[f.name], encoders, table) for f in schema.fields if f.name in store}


def to_value_tree(instance: Any) -> Dict[str, Any]:
    return _walk(instance, "dict_serializer")


def to_json_text(instance: Any) -> str:
    return _dumps(_walk(instance, "json_serializer"))


def from_value_tree(record_type: Any, mapping: Mapping[str, Any]) -> Any:
    if not isinstance(mapping, Mapping):
        raise TypeError(f"{getattr(record_type, '__name__', record_type)} expects a mapping, got {type(mapping).__name__}")
    return record_type.from_dict(mapping)


def from_json_text(record_type: Any, text: str | bytes) -> Any:
    return from_value_tree(record_type, parse_json_text(text))
