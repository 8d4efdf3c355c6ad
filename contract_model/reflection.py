"""
reflection.py - class-level introspection for record types
==========================================================

Public API
----------
ModelMeta
    Metaclass of :class:`~contract_model.model.DataModel`.  At class creation
    it resolves annotations (forward references included), separates
    ``ClassVar`` entries from instance fields, checks class-attribute values
    and collects decorated validators across the MRO.

is_record_type(tp) -> bool
instance_annotations(cls) -> dict
class_annotations(cls) -> dict
declared_validators(cls) -> dict
declared_async_validators(cls) -> dict
model_config(cls) -> Config
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, ClassVar, Dict, List, get_args, get_origin, get_type_hints

from .config import Config
from .errors import SchemaCompileError
from .validators import (
    ValidatorMode,
    async_field_validator_info,
    async_model_validator_info,
    field_validator_info,
    model_validator_info,
)

__all__ = [
    "ModelMeta",
    "is_record_type",
    "instance_annotations",
    "class_annotations",
    "declared_validators",
    "declared_async_validators",
    "model_config",
]

logger = logging.getLogger(__name__)

# Attribute names stored on each record class (always in the class's own __dict__).
_INSTANCE_ANN = "__model_fields__"
_CLASS_ANN = "__model_class_vars__"
_VALIDATORS = "__model_validators__"
_ASYNC_VALIDATORS = "__model_async_validators__"
_RESOLVED = "__model_hints_resolved__"


class ModelMeta(type):

    def __init__(cls, name, bases, namespace, **kwargs):
        super().__init__(name, bases, namespace, **kwargs)
        hints = _resolve_hints(cls, strict=False)
        type.__setattr__(cls, _RESOLVED, hints is not None)
        _split_annotations(cls, hints if hints is not None else _raw_annotations(cls))
        _check_class_vars(cls)
        type.__setattr__(cls, _VALIDATORS, _collect_validators(cls, field_validator_info, model_validator_info))
        async_hooks = _collect_validators(cls, async_field_validator_info, async_model_validator_info)
        if any(async_hooks.values()) and not getattr(cls, "__model_awaitable__", False):
            raise TypeError(f"{name} declares async validators; derive it from AsyncDataModel")
        type.__setattr__(cls, _ASYNC_VALIDATORS, async_hooks)


# --------------------------------------------------------------------------- #
# Annotation resolution                                                       #
# --------------------------------------------------------------------------- #

def _raw_annotations(cls: type) -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        try:
            own = klass.__dict__.get("__annotations__") or inspect.get_annotations(klass)
        except NameError:
            own = {}
        merged.update(own)
    return merged


def _resolve_hints(cls: type, *, strict: bool):
    localns = dict(cls.__dict__)
    localns[cls.__name__] = cls
    try:
        return get_type_hints(cls, localns=localns, include_extras=True)
    except Exception as exc:
        if strict:
            raise SchemaCompileError(f"cannot resolve annotations of {cls.__qualname__}: {exc}") from exc
        logger.debug("Deferring annotation resolution for %s: %s", cls.__qualname__, exc)
        return None


def _split_annotations(cls: type, hints: Dict[str, Any]) -> None:
    instance: Dict[str, Any] = {}
    class_level: Dict[str, Any] = {}
    for attr, tp in hints.items():
        if attr.startswith("__") and attr.endswith("__"):
            continue
        if tp is ClassVar or get_origin(tp) is ClassVar:
            args = get_args(tp)
            class_level[attr] = args[0] if args else Any
        elif isinstance(tp, str) and tp.replace(" ", "").startswith(("ClassVar", "typing.ClassVar")):
            class_level[attr] = Any
        else:
            instance[attr] = tp
    type.__setattr__(cls, _INSTANCE_ANN, instance)
    type.__setattr__(cls, _CLASS_ANN, class_level)


def _check_class_vars(cls: type) -> None:
    for attr, tp in cls.__dict__[_CLASS_ANN].items():
        if not hasattr(cls, attr) or getattr(cls, attr) is None:
            raise TypeError(f"Missing required class attribute: {attr}")
        value = getattr(cls, attr)
        if isinstance(tp, type) and not isinstance(value, tp):
            raise TypeError(f"Class attribute {attr} must be {tp}, got {type(value)}")


def _collect_validators(cls: type, field_info, model_info) -> Dict[str, Any]:
    """Decorated validators from the MRO; base-class hooks run first.

    A subclass attribute with the same name replaces the inherited one.
    """
    attrs: Dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        for attr_name, attr_value in klass.__dict__.items():
            if field_info(attr_value) or model_info(attr_value):
                attrs.pop(attr_name, None)
                attrs[attr_name] = attr_value

    field_before: Dict[str, List[Any]] = {}
    field_after: Dict[str, List[Any]] = {}
    model_before: List[Any] = []
    model_after: List[Any] = []
    for attr_value in attrs.values():
        info = field_info(attr_value)
        if info is not None:
            target = field_before if info["mode"] is ValidatorMode.BEFORE else field_after
            target.setdefault(info["field"], []).append(attr_value)
        info = model_info(attr_value)
        if info is not None:
            target_list = model_before if info["mode"] is ValidatorMode.BEFORE else model_after
            target_list.append(attr_value)
    return {
        "field_before": field_before,
        "field_after": field_after,
        "model_before": model_before,
        "model_after": model_after,
    }


# --------------------------------------------------------------------------- #
# Accessors                                                                   #
# --------------------------------------------------------------------------- #

def is_record_type(tp: Any) -> bool:
    return isinstance(tp, ModelMeta) and _INSTANCE_ANN in tp.__dict__


def instance_annotations(cls: Any) -> Dict[str, Any]:
    """Ordered ``field -> declared type`` of *cls*, ClassVars excluded.

    Annotations that could not be resolved when the class was created are
    resolved now; failing again is a :class:`SchemaCompileError`.
    """
    if not is_record_type(cls):
        raise SchemaCompileError(f"{cls!r} is not a record type")
    if not cls.__dict__[_RESOLVED]:
        hints = _resolve_hints(cls, strict=True)
        _split_annotations(cls, hints)
        _check_class_vars(cls)
        type.__setattr__(cls, _RESOLVED, True)
        logger.debug("Resolved deferred annotations of %s", cls.__qualname__)
    return dict(cls.__dict__[_INSTANCE_ANN])


def class_annotations(cls: Any) -> Dict[str, Any]:
    if not is_record_type(cls):
        raise SchemaCompileError(f"{cls!r} is not a record type")
    return dict(cls.__dict__[_CLASS_ANN])


def declared_validators(cls: Any) -> Dict[str, Any]:
    if not is_record_type(cls):
        raise SchemaCompileError(f"{cls!r} is not a record type")
    return cls.__dict__[_VALIDATORS]


def declared_async_validators(cls: Any) -> Dict[str, Any]:
    if not is_record_type(cls):
        raise SchemaCompileError(f"{cls!r} is not a record type")
    return cls.__dict__[_ASYNC_VALIDATORS]


def model_config(cls: Any) -> Config:
    config = getattr(cls, "__model_config__", None)
    if config is None:
        return Config()
    if not isinstance(config, Config):
        raise SchemaCompileError(
            f"{cls.__qualname__}.__model_config__ must be a Config, got {type(config).__name__}"
        )
    return config
