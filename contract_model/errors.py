"""
errors.py - exception taxonomy for contract-model
=================================================

Public API
----------
SchemaError
    Root of every exception raised by the package itself.

SchemaCompileError
    A record type (or one of its annotations) could not be compiled.

ParseError
    Malformed JSON text or a JSON document whose root is not an object.

ValidationError
    Raised once per failed construction; carries the full error tree.

The ``*_message`` helpers produce the stable message texts recorded in the
error tree so every call-site words a failure the same way.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

__all__ = [
    "SchemaError",
    "SchemaCompileError",
    "ParseError",
    "ValidationError",
    "MISSING_REQUIRED_FIELD",
    "DEFAULT_FACTORY_FAILED",
    "INVALID_SUBERROR",
    "type_mismatch_message",
    "container_shape_message",
    "tuple_length_message",
    "union_no_match_message",
    "nested_failure_message",
]

# --------------------------------------------------------------------------- #
# Exceptions                                                                  #
# --------------------------------------------------------------------------- #

class SchemaError(ValueError):
    """Base class for errors raised by contract-model."""


class SchemaCompileError(SchemaError):
    """Raised when a record type cannot be compiled into a schema."""


class ParseError(SchemaError):
    """Raised when JSON input text cannot be turned into a mapping."""


class ValidationError(SchemaError, TypeError):
    """Raised when one or more fields fail validation.

    ``errors`` maps a dotted path (``"items.0.price"``) to one message or a
    list of messages.  ``str(exc)`` is the same tree rendered as JSON, so
    ``json.loads(str(exc)) == exc.errors``.
    """

    def __init__(self, errors: Mapping[str, Any]):
        self.errors = dict(errors)
        super().__init__(json.dumps(self.errors, indent=2))

    def __str__(self) -> str:
        return self.args[0]

    def __reduce__(self):
        return (type(self), (self.errors,))


# --------------------------------------------------------------------------- #
# Message texts                                                               #
# --------------------------------------------------------------------------- #

MISSING_REQUIRED_FIELD = "Missing required field"
DEFAULT_FACTORY_FAILED = "Missing required field and default factory call failed"
INVALID_SUBERROR = "Invalid suberror JSON"


def type_mismatch_message(expected: str, value: Any) -> str:
    return f"Expected type {expected}, got {type(value).__name__}"


def container_shape_message(kind: str, value: Any) -> str:
    return f"Expected a {kind}, got {type(value).__name__}"


def tuple_length_message(expected: int, got: int) -> str:
    return f"Expected tuple of length {expected}, got {got}"


def union_no_match_message(value: Any) -> str:
    return f"Value did not match any candidate in Union: got {type(value).__name__}"


def nested_failure_message(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"
