"""Per-model configuration (serializers, deserializers, validate-on-set)."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Union

from .deserializer import GLOBAL_DESERIALIZERS, DeserializerRegistry

__all__ = ["Config"]

Encoder = Callable[[Any], Any]


class Config:
    """Configuration attached to a model as ``__model_config__``.

    Attributes
    ----------
    dict_serializer : dict
        ``{type: fn}`` encoders used by ``to_dict`` for values of that exact type.
    json_serializer : dict
        ``{type: fn}`` encoders used by ``to_json``.
    deserializer : DeserializerRegistry
        The global defaults with this model's entries layered on top.
    validate_on_set : bool
        Validate attribute assignment against the field's declared type.
    """

    def __init__(
        self,
        dict_serializer: Optional[Mapping[type, Encoder]] = None,
        json_serializer: Optional[Mapping[type, Encoder]] = None,
        deserializer: Union[Mapping[type, Mapping[type, Encoder]], DeserializerRegistry, None] = None,
        validate_on_set: bool = True,
    ):
        self.dict_serializer: Dict[type, Encoder] = dict(dict_serializer or {})
        self.json_serializer: Dict[type, Encoder] = dict(json_serializer or {})

        if deserializer is None:
            own = DeserializerRegistry()
        elif isinstance(deserializer, DeserializerRegistry):
            own = deserializer
        else:
            own = DeserializerRegistry.from_mapping(deserializer)
        self.deserializer = GLOBAL_DESERIALIZERS.merged(own)

        self.validate_on_set = bool(validate_on_set)

    def __repr__(self) -> str:
        return (
            f"Config(dict_serializer={list(self.dict_serializer)!r}, "
            f"json_serializer={list(self.json_serializer)!r}, "
            f"deserializer={self.deserializer!r}, validate_on_set={self.validate_on_set})"
        )
