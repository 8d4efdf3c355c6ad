"""
validators.py - lifecycle hooks run around field assembly
=========================================================

Public API
----------
ValidatorMode
    ``BEFORE`` (raw input) or ``AFTER`` (coerced values / finished instance).

field_validator(*, mode)
    Decorator; the field is named by the hook's value parameter::

        @field_validator(mode=ValidatorMode.BEFORE)
        @classmethod
        def age(cls, age): ...

model_validator(*, mode)
    Decorator for whole-input (before) or whole-instance (after) hooks.

HookSignature, ValidatorHook, ValidatorSet
    Compiled form: every hook's calling convention is decided once, when the
    model schema is built, and the four hook families carry "has any" flags.

async_field_validator(*, mode) / async_model_validator(*, mode)
    Coroutine-function counterparts, run only when an
    :class:`~contract_model.model.AsyncDataModel` instance is awaited.

run_model_before / run_field_before / run_field_after / run_model_after
    The pipeline stages used by record construction.  Exceptions raised by a
    hook are not caught here; they abort construction.

run_async_model_before / run_async_field_before / run_async_field_after /
run_async_model_after
    The same stages for async hooks; each hook result is awaited.
"""

from __future__ import annotations

import inspect
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, MutableMapping, Optional, Sequence, Tuple

from .errors import SchemaCompileError

__all__ = [
    "ValidatorMode",
    "HookSignature",
    "ValidatorHook",
    "ValidatorSet",
    "field_validator",
    "model_validator",
    "async_field_validator",
    "async_model_validator",
    "run_model_before",
    "run_field_before",
    "run_field_after",
    "run_model_after",
    "run_async_model_before",
    "run_async_field_before",
    "run_async_field_after",
    "run_async_model_after",
]

FIELD_VALIDATOR_TAG = "__contract_field_validator__"
MODEL_VALIDATOR_TAG = "__contract_model_validator__"
ASYNC_FIELD_VALIDATOR_TAG = "__contract_async_field_validator__"
ASYNC_MODEL_VALIDATOR_TAG = "__contract_async_model_validator__"


class ValidatorMode(Enum):
    BEFORE = "before"
    AFTER = "after"


class HookSignature(Enum):
    """How a hook is called: ``fn(value)`` or ``fn(owner_type, value)``."""

    VALUE_ONLY = 1
    TYPE_AND_VALUE = 2


# --------------------------------------------------------------------------- #
# Decorators                                                                  #
# --------------------------------------------------------------------------- #

def _unwrap(fn: Any) -> Callable[..., Any]:
    return fn.__func__ if isinstance(fn, (classmethod, staticmethod)) else fn


def _param_names(func: Callable[..., Any]) -> List[str]:
    return list(inspect.signature(func).parameters)


def _field_hook_target(fn: Any, label: str) -> str:
    """Name of the field a field hook applies to (its last parameter)."""
    params = _param_names(_unwrap(fn))
    expected = 1 if isinstance(fn, staticmethod) else 2
    if len(params) != expected:
        raise ValueError(f"{label} must have exactly one field parameter (aside from 'cls' or 'self')")
    return params[-1]


def _check_model_hook(fn: Any, label: str) -> None:
    params = _param_names(_unwrap(fn))
    if isinstance(fn, classmethod):
        if len(params) != 2:
            raise ValueError(f"{label} (as a classmethod) must have exactly one parameter aside from 'cls'")
    elif isinstance(fn, staticmethod):
        if len(params) != 1:
            raise ValueError(f"{label} (as a staticmethod) must have exactly one parameter")
    elif len(params) not in (1, 2):
        raise ValueError(f"{label} (as an instance method) must have no parameter aside from 'self'")


def _require_coroutine(fn: Any, label: str) -> None:
    if not inspect.iscoroutinefunction(_unwrap(fn)):
        raise TypeError(f"{label} must be defined with 'async def'")


def field_validator(*, mode: ValidatorMode):
    """Mark a function as a validator for the field named by its value parameter."""
    mode = ValidatorMode(mode)

    def decorator(fn):
        field = _field_hook_target(fn, "Field validator")
        setattr(_unwrap(fn), FIELD_VALIDATOR_TAG, {"mode": mode, "field": field})
        return fn

    return decorator


def model_validator(*, mode: ValidatorMode):
    """Mark a function as a whole-model validator.

    BEFORE hooks receive the input mapping; a mapping they return is merged
    into it.  AFTER hooks receive the instance (``self`` for instance
    methods) and their return value is ignored.
    """
    mode = ValidatorMode(mode)

    def decorator(fn):
        _check_model_hook(fn, "Model validator")
        setattr(_unwrap(fn), MODEL_VALIDATOR_TAG, {"mode": mode})
        return fn

    return decorator


def async_field_validator(*, mode: ValidatorMode):
    """Like :func:`field_validator`, for ``async def`` hooks."""
    mode = ValidatorMode(mode)

    def decorator(fn):
        _require_coroutine(fn, "Async field validator")
        field = _field_hook_target(fn, "Async field validator")
        setattr(_unwrap(fn), ASYNC_FIELD_VALIDATOR_TAG, {"mode": mode, "field": field})
        return fn

    return decorator


def async_model_validator(*, mode: ValidatorMode):
    """Like :func:`model_validator`, for ``async def`` hooks.

    Only :class:`~contract_model.model.AsyncDataModel` subclasses may
    declare them; they run when the instance is awaited.
    """
    mode = ValidatorMode(mode)

    def decorator(fn):
        _require_coroutine(fn, "Async model validator")
        _check_model_hook(fn, "Async model validator")
        setattr(_unwrap(fn), ASYNC_MODEL_VALIDATOR_TAG, {"mode": mode})
        return fn

    return decorator


def field_validator_info(attr: Any) -> Optional[Dict[str, Any]]:
    return getattr(_unwrap(attr), FIELD_VALIDATOR_TAG, None)


def model_validator_info(attr: Any) -> Optional[Dict[str, Any]]:
    return getattr(_unwrap(attr), MODEL_VALIDATOR_TAG, None)


def async_field_validator_info(attr: Any) -> Optional[Dict[str, Any]]:
    return getattr(_unwrap(attr), ASYNC_FIELD_VALIDATOR_TAG, None)


def async_model_validator_info(attr: Any) -> Optional[Dict[str, Any]]:
    return getattr(_unwrap(attr), ASYNC_MODEL_VALIDATOR_TAG, None)


# --------------------------------------------------------------------------- #
# Compiled hooks                                                              #
# --------------------------------------------------------------------------- #

class ValidatorHook:
    """A validator with its calling convention fixed at compile time."""

    __slots__ = ("func", "signature", "name")

    def __init__(self, func: Callable[..., Any], signature: HookSignature, name: str = ""):
        self.func = func
        self.signature = signature
        self.name = name or getattr(func, "__qualname__", repr(func))

    @classmethod
    def resolve(cls, attr: Any) -> "ValidatorHook":
        """Decide the signature of a decorated class attribute by its arity."""
        func = _unwrap(attr)
        if not callable(func):
            raise SchemaCompileError(f"validator {attr!r} is not callable")
        arity = len(_param_names(func))
        if arity == 1:
            return cls(func, HookSignature.VALUE_ONLY)
        if arity == 2:
            return cls(func, HookSignature.TYPE_AND_VALUE)
        raise SchemaCompileError(
            f"validator {getattr(func, '__qualname__', func)!r} takes {arity} parameters; expected 1 or 2"
        )

    def __call__(self, owner: type, value: Any) -> Any:
        if self.signature is HookSignature.TYPE_AND_VALUE:
            return self.func(owner, value)
        return self.func(value)

    def __repr__(self) -> str:
        return f"ValidatorHook({self.name}, {self.signature.name})"


_NO_HOOKS: Tuple[ValidatorHook, ...] = ()


class ValidatorSet:
    """The four hook families of one record type; read-only once built."""

    __slots__ = (
        "field_before",
        "field_after",
        "model_before",
        "model_after",
        "has_field_before",
        "has_field_after",
        "has_model_before",
        "has_model_after",
    )

    def __init__(
        self,
        field_before: Optional[Mapping[str, Sequence[ValidatorHook]]] = None,
        field_after: Optional[Mapping[str, Sequence[ValidatorHook]]] = None,
        model_before: Iterable[ValidatorHook] = _NO_HOOKS,
        model_after: Iterable[ValidatorHook] = _NO_HOOKS,
    ):
        self.field_before = {k: tuple(v) for k, v in (field_before or {}).items() if v}
        self.field_after = {k: tuple(v) for k, v in (field_after or {}).items() if v}
        self.model_before = tuple(model_before)
        self.model_after = tuple(model_after)
        self.has_field_before = bool(self.field_before)
        self.has_field_after = bool(self.field_after)
        self.has_model_before = bool(self.model_before)
        self.has_model_after = bool(self.model_after)

    @classmethod
    def build(cls, declared: Mapping[str, Any]) -> "ValidatorSet":
        """Resolve raw decorated attributes (as collected by reflection).

        A type that declares no hooks shares :data:`EMPTY_VALIDATORS`.
        """
        if not any(declared.values()):
            return EMPTY_VALIDATORS
        return cls(
            field_before={f: [ValidatorHook.resolve(a) for a in attrs]
                          for f, attrs in declared.get("field_before", {}).items()},
            field_after={f: [ValidatorHook.resolve(a) for a in attrs]
                         for f, attrs in declared.get("field_after", {}).items()},
            model_before=[ValidatorHook.resolve(a) for a in declared.get("model_before", ())],
            model_after=[ValidatorHook.resolve(a) for a in declared.get("model_after", ())],
        )

    @property
    def has_any(self) -> bool:
        return self.has_field_before or self.has_field_after or self.has_model_before or self.has_model_after

    def __repr__(self) -> str:
        return (
            f"ValidatorSet(field_before={list(self.field_before)}, field_after={list(self.field_after)}, "
            f"model_before={len(self.model_before)}, model_after={len(self.model_after)})"
        )


EMPTY_VALIDATORS = ValidatorSet()


# --------------------------------------------------------------------------- #
# Pipeline stages                                                             #
# --------------------------------------------------------------------------- #

def run_model_before(validators: ValidatorSet, owner: type, data: MutableMapping[str, Any]) -> None:
    for hook in validators.model_before:
        result = hook(owner, data)
        if isinstance(result, Mapping) and result is not data:
            data.update(result)


def run_field_before(
    validators: ValidatorSet,
    owner: type,
    data: MutableMapping[str, Any],
    input_keys: Mapping[str, Sequence[str]],
) -> None:
    """Transform single input entries in place.

    *input_keys* maps a field name to the keys it may arrive under, in
    lookup order (aliases, then the canonical name).
    """
    for name, hooks in validators.field_before.items():
        key = next((k for k in input_keys.get(name, (name,)) if k in data), None)
        if key is None:
            continue
        value = data[key]
        for hook in hooks:
            value = hook(owner, value)
        data[key] = value


def run_field_after(validators: ValidatorSet, owner: type, store: MutableMapping[str, Any]) -> None:
    for name, hooks in validators.field_after.items():
        if name not in store:
            continue
        value = store[name]
        for hook in hooks:
            value = hook(owner, value)
        store[name] = value


def run_model_after(validators: ValidatorSet, owner: type, instance: Any) -> None:
    for hook in validators.model_after:
        hook(owner, instance)


async def run_async_model_before(validators: ValidatorSet, owner: type, data: MutableMapping[str, Any]) -> None:
    for hook in validators.model_before:
        result = await hook(owner, data)
        if isinstance(result, Mapping) and result is not data:
            data.update(result)


async def run_async_field_before(
    validators: ValidatorSet,
    owner: type,
    data: MutableMapping[str, Any],
    input_keys: Mapping[str, Sequence[str]],
) -> None:
    for name, hooks in validators.field_before.items():
        key = next((k for k in input_keys.get(name, (name,)) if k in data), None)
        if key is None:
            continue
        value = data[key]
        for hook in hooks:
            value = await hook(owner, value)
        data[key] = value


async def run_async_field_after(validators: ValidatorSet, owner: type, store: MutableMapping[str, Any]) -> None:
    for name, hooks in validators.field_after.items():
        if name not in store:
            continue
        value = store[name]
        for hook in hooks:
            value = await hook(owner, value)
        store[name] = value


async def run_async_model_after(validators: ValidatorSet, owner: type, instance: Any) -> None:
    for hook in validators.model_after:
        await hook(owner, instance)
