"""
parser.py - JSON / file / mapping input loader
==============================================

Public API
----------
`parse_json_text(text) -> dict`
    Parse JSON text whose root must be an object.  Empty input, malformed
    syntax and non-object roots raise :class:`~contract_model.errors.ParseError`.

`parse_input(source) -> dict`
    Convert user-supplied *source* (Mapping / Path / file path / JSON literal)
    into a plain ``dict``, ready for ``Model.from_dict``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from .errors import ParseError

__all__ = ["parse_json_text", "parse_input"]

# --------------------------------------------------------------------------- #
# JSON text                                                                   #
# --------------------------------------------------------------------------- #

def parse_json_text(text: str | bytes | bytearray) -> dict[str, Any]:
    """Return the object encoded by *text*.

    Parameters
    ----------
    text : str | bytes | bytearray
        UTF-8 JSON document.

    Raises
    ------
    TypeError
        *text* is not a string or bytes-like object.
    ParseError
        Empty input, malformed JSON, or a root that is not an object.
    """

    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Invalid JSON: {exc}") from exc
    elif not isinstance(text, str):
        raise TypeError(f"JSON input must be str or bytes, got {type(text).__name__}")

    if not text.strip():
        raise ParseError("Empty JSON string")
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON: {exc}") from exc
    if not isinstance(doc, dict):
        raise ParseError("JSON root must be an object")
    return doc

# --------------------------------------------------------------------------- #
# Input parsing utility                                                       #
# --------------------------------------------------------------------------- #

def _is_file(text: str) -> bool:
    """True when *text* names an existing file; unusable paths count as no."""
    try:
        return Path(text).is_file()
    except (OSError, ValueError):
        return False


def parse_input(source: str | bytes | Path | Mapping[str, Any]) -> dict[str, Any]:
    """Convert *source* to a *raw* ``dict`` (no validation).

    Parameters
    ----------
    source
        Supported variants:
        * ``Mapping`` - copied directly.
        * ``Path`` - JSON file on disk.
        * ``str``  - existing file path → load; else parsed as a JSON literal.
        * ``bytes`` - parsed as a JSON literal.
    """

    # Mapping - already dict-like ------------------------------------------
    if isinstance(source, Mapping):
        return dict(source)

    # Path - read JSON file -------------------------------------------------
    if isinstance(source, Path):
        return parse_json_text(source.read_text(encoding="utf-8"))

    if isinstance(source, str):
        stripped = source.strip()
        if stripped and not stripped.startswith(("{", "[")) and _is_file(source):
            return parse_json_text(Path(source).read_text(encoding="utf-8"))
        return parse_json_text(source)

    if isinstance(source, (bytes, bytearray)):
        return parse_json_text(source)

    raise TypeError(f"Unsupported type for parse_input: {type(source)}")
