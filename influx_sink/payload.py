"""
Payload shape dispatch.

A record resolves to exactly one of:
- SchemaLessPayload: no value schema, value is a mapping
- TextualPayload:    STRING schema, value is JSON text holding a flat object
- StructuredPayload: STRUCT schema, value is a Struct
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from influx_sink.errors import UnsupportedSchemaError, UnsupportedValueTypeError
from influx_sink.records import SchemaType, SinkRecord, Struct


@dataclass(frozen=True, slots=True)
class SchemaLessPayload:
    mapping: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class TextualPayload:
    text: Optional[str]


@dataclass(frozen=True, slots=True)
class StructuredPayload:
    struct: Struct


PayloadShape = Union[SchemaLessPayload, TextualPayload, StructuredPayload]


def resolve_shape(record: SinkRecord) -> PayloadShape:
    schema = record.value_schema
    value = record.value

    if schema is None:
        if isinstance(value, Mapping):
            return SchemaLessPayload(mapping=value)
        raise UnsupportedValueTypeError(value)

    if schema.type is SchemaType.STRING:
        # None (tombstone) is carried through; it fails as invalid JSON once parsed.
        if value is not None and not isinstance(value, str):
            raise UnsupportedSchemaError(schema.type, detail=f"value is {type(value).__name__}, expected str")
        return TextualPayload(text=value)

    if schema.type is SchemaType.STRUCT:
        if not isinstance(value, Struct):
            raise UnsupportedSchemaError(schema.type, detail=f"value is {type(value).__name__}, expected Struct")
        return StructuredPayload(struct=value)

    raise UnsupportedSchemaError(schema.type)


__all__ = [
    "SchemaLessPayload",
    "TextualPayload",
    "StructuredPayload",
    "PayloadShape",
    "resolve_shape",
]
