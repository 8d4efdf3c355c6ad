"""
contract_model – declarative, validated record types with type coercion.
"""
from .collector import ErrorCollector
from .config import Config
from .deserializer import GLOBAL_DESERIALIZERS, DeserializerRegistry
from .errors import ParseError, SchemaCompileError, SchemaError, ValidationError
from .fields import UNDEFINED, Field
from .model import AsyncDataModel, DataModel
from .model_schema import FieldSchema, ModelSchema, compile_model_schema
from .parser import parse_input
from .type_schema import ContainerKind, TypeSchemaNode, compile_type_schema
from .validator import INVALID, validate_and_convert
from .validators import (
    ValidatorMode,
    async_field_validator,
    async_model_validator,
    field_validator,
    model_validator,
)

__all__ = [
    "DataModel",
    "AsyncDataModel",
    "Field",
    "Config",
    "ValidatorMode",
    "field_validator",
    "model_validator",
    "async_field_validator",
    "async_model_validator",
    "SchemaError",
    "SchemaCompileError",
    "ValidationError",
    "ParseError",
    "ErrorCollector",
    "DeserializerRegistry",
    "GLOBAL_DESERIALIZERS",
    "ContainerKind",
    "TypeSchemaNode",
    "FieldSchema",
    "ModelSchema",
    "compile_type_schema",
    "compile_model_schema",
    "validate_and_convert",
    "INVALID",
    "UNDEFINED",
    "parse_input",
]
