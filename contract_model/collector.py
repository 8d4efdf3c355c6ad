"""
collector.py - path-qualified error accumulation
================================================

Public API
----------
ErrorCollector
    Accumulates ``path -> message`` entries into an error tree.  A second
    message at the same path promotes the entry to a list; nothing is ever
    overwritten.  Sub-trees produced by nested record construction are
    merged under ``<path>.<key>``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import INVALID_SUBERROR

__all__ = ["ErrorCollector"]

logger = logging.getLogger(__name__)

ErrorEntry = Union[str, List[str]]


class ErrorCollector:
    """Mutable error tree; allocated lazily on the first error."""

    __slots__ = ("_errors",)

    def __init__(self) -> None:
        self._errors: Optional[Dict[str, ErrorEntry]] = None

    # ------------------------------------------------------------------ #
    # Recording                                                          #
    # ------------------------------------------------------------------ #
    def add_error(self, path: str, message: str) -> None:
        if self._errors is None:
            self._errors = {}
        current = self._errors.get(path)
        if current is None:
            self._errors[path] = message
        elif isinstance(current, list):
            current.append(message)
        else:
            self._errors[path] = [current, message]

    def add_suberror(self, path: str, payload: Union[str, Mapping[str, Any]]) -> None:
        """Merge a previously rendered error tree under *path*.

        *payload* is either the JSON rendering of a tree or the tree itself.
        Anything that is not an object degrades to a single error at *path*.
        """
        tree: Any = payload
        if isinstance(payload, (str, bytes)):
            try:
                tree = json.loads(payload)
            except ValueError:
                tree = None
        if not isinstance(tree, Mapping):
            logger.debug("Unparseable suberror payload at %s: %r", path, payload)
            self.add_error(path, INVALID_SUBERROR)
            return

        for key, entry in tree.items():
            sub_path = f"{path}.{key}" if path else str(key)
            if isinstance(entry, list):
                for message in entry:
                    self.add_error(sub_path, str(message))
            else:
                self.add_error(sub_path, str(entry))

    # ------------------------------------------------------------------ #
    # Inspection                                                         #
    # ------------------------------------------------------------------ #
    def has_errors(self) -> bool:
        return self._errors is not None

    @property
    def errors(self) -> Dict[str, ErrorEntry]:
        """Copy of the tree (lists copied too); empty when nothing failed."""
        if self._errors is None:
            return {}
        return {k: list(v) if isinstance(v, list) else v for k, v in self._errors.items()}

    def to_json(self) -> str:
        if self._errors is None:
            return ""
        return json.dumps(self._errors, indent=2)

    def __len__(self) -> int:
        return 0 if self._errors is None else len(self._errors)

    def __bool__(self) -> bool:
        return self._errors is not None

    def __repr__(self) -> str:
        return f"ErrorCollector({self.errors!r})"
