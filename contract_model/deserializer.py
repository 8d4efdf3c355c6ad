"""
deserializer.py - (target type, source type) -> converter table
===============================================================

Public API
----------
DeserializerRegistry
    Exact-pair lookup table consulted by the plain-value coercion path before
    the constructor fallback.  No subclass matching, no wildcards.

GLOBAL_DESERIALIZERS
    Process-wide defaults every model's table is layered over.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple

import pandas as pd

from .utils import _type_name

__all__ = ["DeserializerRegistry", "GLOBAL_DESERIALIZERS"]

Converter = Callable[[Any], Any]


class DeserializerRegistry:
    """Immutable-by-convention table; build with :meth:`register` then share."""

    __slots__ = ("_table",)

    def __init__(self, table: Optional[Mapping[Tuple[type, type], Converter]] = None):
        self._table: Dict[Tuple[type, type], Converter] = dict(table or {})

    @classmethod
    def from_mapping(cls, mapping: Mapping[type, Mapping[type, Converter]]) -> "DeserializerRegistry":
        """Build from the nested ``{target: {source: fn}}`` form used by ``Config``."""
        reg = cls()
        for target, by_source in mapping.items():
            for source, fn in by_source.items():
                reg.register(target, source, fn)
        return reg

    def register(self, target: type, source: type, fn: Converter) -> "DeserializerRegistry":
        if not callable(fn):
            raise TypeError(f"deserializer for {target!r} <- {source!r} is not callable")
        self._table[(target, source)] = fn
        return self

    def lookup(self, target: Any, source: type) -> Optional[Converter]:
        try:
            return self._table.get((target, source))
        except TypeError:  # unhashable declared type
            return None

    def merged(self, other: "DeserializerRegistry") -> "DeserializerRegistry":
        """New registry with *other*'s entries winning on the same pair."""
        out = DeserializerRegistry(self._table)
        out._table.update(other._table)
        return out

    def __contains__(self, pair: object) -> bool:
        return pair in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[Tuple[type, type]]:
        return iter(self._table)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{_type_name(t)}<-{_type_name(s)}" for t, s in self._table)
        return f"DeserializerRegistry({pairs})"


GLOBAL_DESERIALIZERS = DeserializerRegistry.from_mapping({
    _dt.datetime: {
        str: _dt.datetime.fromisoformat,
        int: _dt.datetime.fromtimestamp,
        float: _dt.datetime.fromtimestamp,
    },
    _dt.date: {
        str: _dt.date.fromisoformat,
    },
    pd.DataFrame: {
        list: pd.DataFrame.from_records,
    },
})
