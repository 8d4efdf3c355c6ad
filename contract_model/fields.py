"""Field descriptor: default value, default factory and input aliases."""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional, Union

__all__ = ["Field", "UNDEFINED"]


class _Undefined:
    """Marker for "no default declared" (``None`` is a legitimate default)."""

    _instance: Optional["_Undefined"] = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Undefined":
        return self

    def __deepcopy__(self, memo: dict) -> "_Undefined":
        return self

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()


class Field:
    """Per-field metadata declared as the class attribute of an annotation.

    ``alias`` is one name or a list/tuple of names accepted as input keys
    before the canonical field name.  When both ``default`` and
    ``default_factory`` are given the factory is used.
    """

    __slots__ = ("default", "default_factory", "alias")

    def __init__(
        self,
        *,
        default: Any = UNDEFINED,
        default_factory: Optional[Callable[[], Any]] = None,
        alias: Union[str, Iterable[str], None] = None,
    ):
        if default_factory is not None and not callable(default_factory):
            raise TypeError("default_factory must be callable")
        self.default = default
        self.default_factory = default_factory
        self.alias: List[str] = _normalise_alias(alias)

    def __repr__(self) -> str:
        parts = []
        if self.default is not UNDEFINED:
            parts.append(f"default={self.default!r}")
        if self.default_factory is not None:
            parts.append(f"default_factory={self.default_factory!r}")
        if self.alias:
            parts.append(f"alias={self.alias!r}")
        return f"Field({', '.join(parts)})"


def _normalise_alias(alias: Union[str, Iterable[str], None]) -> List[str]:
    if alias is None:
        return []
    if isinstance(alias, str):
        return [alias]
    names = list(alias)
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"alias entries must be str, got {type(name).__name__}")
    return names
