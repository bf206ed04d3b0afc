"""
Base model for everything that crosses the wire.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, SerializationInfo, SerializerFunctionWrapHandler, model_serializer


class WireModel(BaseModel):
    """Frozen record whose absent optional members never appear on the wire.

    A ``None`` field is omitted when serialized. Fields named in
    ``nullable_fields`` are omitted only when never set, so an explicit
    ``None`` is emitted as JSON ``null``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler, info: SerializationInfo) -> dict[str, Any]:
        data = handler(self)
        for name, field in type(self).model_fields.items():
            if getattr(self, name) is not None:
                continue
            if name in self.nullable_fields and name in self.model_fields_set:
                continue
            key = field.alias if info.by_alias and field.alias else name
            data.pop(key, None)
        return self._to_wire(data, info)

    def _to_wire(self, data: dict[str, Any], info: SerializationInfo) -> dict[str, Any]:
        return data
