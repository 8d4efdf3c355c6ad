"""
model.py - the DataModel record type
====================================

Declare fields as annotations; defaults, default factories and aliases as
class attributes (plain values or :class:`~contract_model.fields.Field`)::

    class Product(DataModel):
        id: int
        name: str = Field(alias="title")
        tags: List[str] = Field(default_factory=list)
        price: Optional[float] = None

    Product(id="1", title="Widget")          # id coerced to 1
    Product.from_json('{"id": 1, "name": "Widget"}').to_dict()

Construction runs model-before hooks, field-before hooks, validates every
field (collecting all errors), then field-after and model-after hooks.  Any
field error raises a single :class:`~contract_model.errors.ValidationError`.

Public API
----------
DataModel
AsyncDataModel
    Awaitable variant: ``await Model(**data)`` runs async before-hooks, the
    construction above, then async after-hooks.
construct(record_type, data) -> instance
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Mapping, TypeVar

from . import codec
from .collector import ErrorCollector
from .config import Config
from .errors import DEFAULT_FACTORY_FAILED, MISSING_REQUIRED_FIELD, ValidationError
from .fields import UNDEFINED
from .model_schema import ModelSchema, compile_model_schema
from .reflection import ModelMeta
from .validator import INVALID, validate_and_convert
from .validators import (
    run_async_field_after,
    run_async_field_before,
    run_async_model_after,
    run_async_model_before,
    run_field_after,
    run_field_before,
    run_model_after,
    run_model_before,
)

__all__ = ["DataModel", "AsyncDataModel", "construct"]

logger = logging.getLogger(__name__)

M = TypeVar("M", bound="DataModel")

# Values of these types are deep-copied by ``copy.deepcopy(instance)`` even
# though they carry no ``__deepcopy__`` of their own.
_COPYABLE_CONTAINERS = (list, dict, set, frozenset, tuple, bytearray)

# Input held by an AsyncDataModel until it is awaited.
_PENDING = "__pending_input__"


# --------------------------------------------------------------------------- #
# Construction                                                                #
# --------------------------------------------------------------------------- #

def construct(record_type: type, data: Mapping[str, Any]) -> Any:
    """Build a *record_type* instance from *data* without calling ``__init__``."""
    if not isinstance(data, Mapping):
        raise TypeError(f"{record_type.__name__} expects a mapping, got {type(data).__name__}")
    instance = record_type.__new__(record_type)
    _populate(instance, dict(data))
    return instance


def _populate(instance: Any, data: Dict[str, Any]) -> None:
    owner = type(instance)
    schema = compile_model_schema(owner)
    hooks = schema.validators

    if hooks.has_model_before:
        run_model_before(hooks, owner, data)
    if hooks.has_field_before:
        run_field_before(hooks, owner, data, schema.input_keys)

    errors = ErrorCollector()
    store = instance.__dict__
    for field in schema.fields:
        key = field.lookup_key(data)
        if key is not None:
            value = data[key]
        elif field.default_factory is not None:
            try:
                value = field.default_factory()
            except Exception as exc:
                logger.debug("default_factory for %s.%s failed: %s", owner.__name__, field.name, exc)
                errors.add_error(field.name, DEFAULT_FACTORY_FAILED)
                continue
        elif field.default is not UNDEFINED:
            value = copy.deepcopy(field.default) if field.copy_default else field.default
        elif field.type_schema.is_optional:
            value = None
        else:
            errors.add_error(field.name, MISSING_REQUIRED_FIELD)
            continue

        conv = validate_and_convert(value, field.type_schema, errors, field.name, schema.deserializers)
        store[field.name] = value if conv is INVALID else conv

    if errors.has_errors():
        raise ValidationError(errors.errors)

    if hooks.has_field_after:
        run_field_after(hooks, owner, store)
    if hooks.has_model_after:
        run_model_after(hooks, owner, instance)


# --------------------------------------------------------------------------- #
# DataModel                                                                   #
# --------------------------------------------------------------------------- #

class DataModel(metaclass=ModelMeta):
    """Base class for validated records."""

    __model_config__ = Config()

    def __init__(self, **data: Any):
        _populate(self, data)

    # -- mapping / JSON ------------------------------------------------------
    @classmethod
    def from_dict(cls: type[M], data: Mapping[str, Any]) -> M:
        return construct(cls, data)

    def to_dict(self) -> Dict[str, Any]:
        return codec.to_value_tree(self)

    @classmethod
    def from_json(cls: type[M], text: str | bytes) -> M:
        return codec.from_json_text(cls, text)

    def to_json(self) -> str:
        return codec.to_json_text(self)

    @classmethod
    def model_schema(cls) -> ModelSchema:
        return compile_model_schema(cls)

    # -- attribute protocol --------------------------------------------------
    def __setattr__(self, name: str, value: Any) -> None:
        schema = compile_model_schema(type(self))
        if name in schema.class_vars:
            raise AttributeError("Cannot set ClassVar attribute")
        field = schema.fields_by_name.get(name)
        if field is not None and schema.validate_on_set:
            errors = ErrorCollector()
            conv = validate_and_convert(value, field.type_schema, errors, name, schema.deserializers)
            if errors.has_errors():
                logger.debug("Rejected assignment %s.%s = %r", type(self).__name__, name, value)
                raise ValidationError(errors.errors)
            value = conv
        object.__setattr__(self, name, value)

    # -- value semantics -----------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataModel):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        schema = compile_model_schema(type(self))
        body = ", ".join(f"{f.name}={self.__dict__.get(f.name)!r}" for f in schema.fields)
        return f"{type(self).__name__}({body})"

    def __copy__(self: M) -> M:
        clone = type(self).__new__(type(self))
        clone.__dict__.update(self.__dict__)
        return clone

    def __deepcopy__(self: M, memo: Dict[int, Any]) -> M:
        clone = type(self).__new__(type(self))
        memo[id(self)] = clone
        for key, value in self.__dict__.items():
            if hasattr(value, "__deepcopy__") or isinstance(value, _COPYABLE_CONTAINERS):
                value = copy.deepcopy(value, memo)
            clone.__dict__[key] = value
        return clone


class AsyncDataModel(DataModel):
    """Record whose construction completes when the instance is awaited::

        person = await AsyncPerson(name="john", age="20")

    ``__init__`` only stores the input.  Awaiting runs async model-before and
    field-before hooks on it, the synchronous construction (sync hooks
    included), then async field-after and model-after hooks.  ``from_dict``,
    ``from_json`` and nested construction stay synchronous and skip the
    async hooks.
    """

    __model_awaitable__ = True

    def __init__(self, **data: Any):
        self.__dict__[_PENDING] = dict(data)

    def __await__(self):
        return self._async_init().__await__()

    async def _async_init(self):
        data = self.__dict__.pop(_PENDING, None)
        if data is None:
            return self
        owner = type(self)
        schema = compile_model_schema(owner)
        hooks = schema.async_validators

        if hooks.has_model_before:
            await run_async_model_before(hooks, owner, data)
        if hooks.has_field_before:
            await run_async_field_before(hooks, owner, data, schema.input_keys)

        _populate(self, data)

        if hooks.has_field_after:
            await run_async_field_after(hooks, owner, self.__dict__)
        if hooks.has_model_after:
            await run_async_model_after(hooks, owner, self)
        return self
