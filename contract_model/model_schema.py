"""
model_schema.py - record type -> compiled field list, config and hooks
======================================================================

Public API
----------
FieldSchema
    Canonical name, input aliases, default / default factory and the compiled
    :class:`~contract_model.type_schema.TypeSchemaNode` of one field.

ModelSchema
    Ordered fields plus the serializer tables, deserializer registry and
    the sync and async validator sets of one record type.

compile_model_schema(record_type) -> ModelSchema
    Compiled once per record type and stored on the class itself.  Raises
    :class:`~contract_model.errors.SchemaCompileError` when the type's field
    annotations cannot be obtained.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from . import reflection
from .deserializer import DeserializerRegistry
from .errors import SchemaCompileError
from .fields import UNDEFINED, Field
from .type_schema import TypeSchemaNode, compile_type_schema
from .validators import EMPTY_VALIDATORS, ValidatorSet

__all__ = ["FieldSchema", "ModelSchema", "compile_model_schema"]

logger = logging.getLogger(__name__)

_SCHEMA_ATTR = "__model_schema__"
_LOCK = threading.Lock()

# Fixed defaults of these types are deep-copied for every construction.
_MUTABLE_DEFAULTS = (list, dict, set, bytearray)


class FieldSchema:
    __slots__ = ("name", "aliases", "default", "default_factory", "type_schema", "input_keys", "copy_default")

    def __init__(
        self,
        name: str,
        type_schema: TypeSchemaNode,
        *,
        aliases: Tuple[str, ...] = (),
        default: Any = UNDEFINED,
        default_factory: Optional[Callable[[], Any]] = None,
    ):
        self.name = name
        self.type_schema = type_schema
        self.aliases = tuple(aliases)
        self.default_factory = default_factory
        self.default = UNDEFINED if default_factory is not None else default
        self.input_keys = self.aliases + (name,)
        self.copy_default = isinstance(self.default, _MUTABLE_DEFAULTS)

    @property
    def required(self) -> bool:
        return self.default_factory is None and self.default is UNDEFINED

    def lookup_key(self, data: Mapping[str, Any]) -> Optional[str]:
        """First input key present in *data*: aliases in order, then the name."""
        for key in self.input_keys:
            if key in data:
                return key
        return None

    def __repr__(self) -> str:
        return f"<FieldSchema {self.name}: {self.type_schema.display_repr}>"


class ModelSchema:
    __slots__ = (
        "record_type",
        "fields",
        "fields_by_name",
        "input_keys",
        "dict_serializer",
        "json_serializer",
        "deserializers",
        "validators",
        "async_validators",
        "validate_on_set",
        "class_vars",
    )

    def __init__(
        self,
        record_type: type,
        fields: Tuple[FieldSchema, ...],
        *,
        dict_serializer: Optional[Mapping[type, Callable[[Any], Any]]] = None,
        json_serializer: Optional[Mapping[type, Callable[[Any], Any]]] = None,
        deserializers: Optional[DeserializerRegistry] = None,
        validators: Optional[ValidatorSet] = None,
        async_validators: Optional[ValidatorSet] = None,
        validate_on_set: bool = True,
        class_vars: Tuple[str, ...] = (),
    ):
        self.record_type = record_type
        self.fields = fields
        self.fields_by_name: Dict[str, FieldSchema] = {f.name: f for f in fields}
        self.input_keys: Dict[str, Tuple[str, ...]] = {f.name: f.input_keys for f in fields}
        self.dict_serializer = dict(dict_serializer or {})
        self.json_serializer = dict(json_serializer or {})
        self.deserializers = deserializers if deserializers is not None else DeserializerRegistry()
        self.validators = validators if validators is not None else EMPTY_VALIDATORS
        self.async_validators = async_validators if async_validators is not None else EMPTY_VALIDATORS
        self.validate_on_set = validate_on_set
        self.class_vars = frozenset(class_vars)

    def __repr__(self) -> str:
        return f"<ModelSchema {self.record_type.__qualname__} fields={[f.name for f in self.fields]}>"


# --------------------------------------------------------------------------- #
# Compilation                                                                 #
# --------------------------------------------------------------------------- #

def compile_model_schema(record_type: Any) -> ModelSchema:
    schema = getattr(record_type, "__dict__", {}).get(_SCHEMA_ATTR)
    if schema is not None:
        return schema

    schema = _build(record_type)
    with _LOCK:
        published = record_type.__dict__.get(_SCHEMA_ATTR)
        if published is None:
            type.__setattr__(record_type, _SCHEMA_ATTR, schema)
            published = schema
            logger.debug("Compiled %r", schema)
        else:
            logger.debug("Discarding concurrently compiled schema for %s", record_type.__qualname__)
    return published


def _build(record_type: Any) -> ModelSchema:
    annotations = reflection.instance_annotations(record_type)
    fields = tuple(_build_field(record_type, name, tp) for name, tp in annotations.items())
    config = reflection.model_config(record_type)
    return ModelSchema(
        record_type,
        fields,
        dict_serializer=config.dict_serializer,
        json_serializer=config.json_serializer,
        deserializers=config.deserializer,
        validators=ValidatorSet.build(reflection.declared_validators(record_type)),
        async_validators=ValidatorSet.build(reflection.declared_async_validators(record_type)),
        validate_on_set=config.validate_on_set,
        class_vars=tuple(reflection.class_annotations(record_type)),
    )


def _build_field(record_type: type, name: str, declared_type: Any) -> FieldSchema:
    try:
        node = compile_type_schema(declared_type)
    except Exception as exc:
        raise SchemaCompileError(
            f"cannot compile field {record_type.__qualname__}.{name}: {exc}"
        ) from exc

    attr = getattr(record_type, name, UNDEFINED)
    if isinstance(attr, Field):
        return FieldSchema(
            name,
            node,
            aliases=tuple(attr.alias),
            default=attr.default,
            default_factory=attr.default_factory,
        )
    if isinstance(attr, property) or (callable(attr) and hasattr(attr, "__func__")):
        attr = UNDEFINED  # a method or property, not a default value
    return FieldSchema(name, node, default=attr)
