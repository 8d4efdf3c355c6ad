"""
utils.py - shared, low-level helpers for the contract-model package.

This module consolidates common helpers for:
- Type display (names used in error messages)
- Safe instance checks against arbitrary declared types
- JSON leaf rendering (datetimes, pandas objects, numpy scalars)
"""

from __future__ import annotations

import datetime as _dt
import json
from typing import Any

import numpy as np
import pandas as pd

# --------------------------------------------------------------------------- #
# Type display                                                                #
# --------------------------------------------------------------------------- #

def _type_name(tp: Any) -> str:
    """Short human-readable name for a declared type."""
    if isinstance(tp, type):
        return tp.__name__
    text = repr(tp)
    return text[len("typing."):] if text.startswith("typing.") else text


def _is_instance(value: Any, tp: Any) -> bool:
    """``isinstance`` that answers False for non-class targets instead of raising."""
    try:
        return isinstance(value, tp)
    except TypeError:
        return False


# --------------------------------------------------------------------------- #
# JSON helpers                                                                #
# --------------------------------------------------------------------------- #

_JSON_PRIMITIVES = (str, int, float, bool, type(None))


def _json_leaf(x: Any) -> Any:
    """Render a non-JSON leaf as something :func:`json.dumps` accepts."""
    if isinstance(x, pd.DataFrame):
        return json.loads(x.to_json(orient="records", date_format="iso"))
    if isinstance(x, pd.Series):
        return json.loads(x.to_json(orient="values", date_format="iso"))
    if isinstance(x, pd.Timestamp):
        return x.isoformat()
    if isinstance(x, (_dt.datetime, _dt.date, _dt.time)):
        return x.isoformat()
    if isinstance(x, np.generic):
        return x.item()
    if isinstance(x, (bytes, bytearray)):
        return bytes(x).decode("utf-8", errors="replace")
    return str(x)


def _json_safe(x: Any) -> Any:
    """Recursively prepare a value tree for :func:`json.dumps`.

    Tuples and sets become lists and non-string mapping keys are stringified.
    """
    if isinstance(x, _JSON_PRIMITIVES):
        return x
    if isinstance(x, dict):
        return {k if isinstance(k, str) else str(_json_safe(k)): _json_safe(v) for k, v in x.items()}
    if isinstance(x, (list, tuple, set, frozenset)):
        return [_json_safe(v) for v in x]
    return _json_leaf(x)


def _dumps(tree: Any) -> str:
    """Compact, UTF-8 preserving JSON rendering of a value tree."""
    return json.dumps(_json_safe(tree), separators=(",", ":"), ensure_ascii=False)
