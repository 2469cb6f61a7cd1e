"""
Inbound record model.

Mirrors the subset of Kafka Connect's data API the tag extractor relies on:
- `Schema` with a primitive `SchemaType`, an optional logical `name` and `parameters`
- `Struct` values addressed by field name through their schema
- `SinkRecord` carrying the value, its optional schema and diagnostic coordinates

Rules:
- `value_schema is None` means the record is schemaless.
- topic/partition/offset are diagnostics only; they never drive control flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class SchemaType(str, Enum):
    INT8 = "INT8"
    INT16 = "INT16"
    INT32 = "INT32"
    INT64 = "INT64"
    FLOAT32 = "FLOAT32"
    FLOAT64 = "FLOAT64"
    BOOLEAN = "BOOLEAN"
    STRING = "STRING"
    BYTES = "BYTES"
    ARRAY = "ARRAY"
    MAP = "MAP"
    STRUCT = "STRUCT"


@dataclass(frozen=True, slots=True)
class Field:
    name: str
    index: int
    schema: "Schema"


@dataclass(frozen=True, slots=True)
class Schema:
    type: SchemaType
    name: Optional[str] = None
    parameters: Dict[str, str] = field(default_factory=dict)
    fields: Tuple[Field, ...] = ()
    optional: bool = False

    @staticmethod
    def struct(*named: Tuple[str, "Schema"], name: Optional[str] = None) -> "Schema":
        """
        Build a STRUCT schema from (field_name, field_schema) pairs, in order.
        """
        fields = tuple(Field(name=str(n), index=i, schema=s) for i, (n, s) in enumerate(named))
        return Schema(type=SchemaType.STRUCT, name=name, fields=fields)

    def field(self, name: str) -> Optional[Field]:
        if self.type is not SchemaType.STRUCT:
            raise TypeError(f"Cannot look up field {name!r} on a non-struct schema ({self.type.value})")
        for f in self.fields:
            if f.name == name:
                return f
        return None


STRING_SCHEMA = Schema(type=SchemaType.STRING)


class Struct:
    """
    Structured value: a mapping from field name to value, validated against a STRUCT schema.
    """

    __slots__ = ("_schema", "_values")

    def __init__(self, schema: Schema, values: Optional[Mapping[str, Any]] = None) -> None:
        if schema.type is not SchemaType.STRUCT:
            raise TypeError(f"Struct requires a STRUCT schema, got {schema.type.value}")
        self._schema = schema
        self._values: Dict[str, Any] = {}
        for name, value in (values or {}).items():
            self.put(name, value)

    @property
    def schema(self) -> Schema:
        return self._schema

    def put(self, name: str, value: Any) -> "Struct":
        self._lookup(name)
        self._values[name] = value
        return self

    def get(self, name: str) -> Any:
        self._lookup(name)
        return self._values.get(name)

    def get_bytes(self, name: str) -> Optional[bytes]:
        v = self.get(name)
        if v is None:
            return None
        if isinstance(v, (bytes, bytearray, memoryview)):
            return bytes(v)
        raise TypeError(f"Field {name!r} is not a bytes value: {type(v).__name__}")

    def get_int32(self, name: str) -> Optional[int]:
        return self._get_int(name)

    def get_int64(self, name: str) -> Optional[int]:
        return self._get_int(name)

    def _get_int(self, name: str) -> Optional[int]:
        v = self.get(name)
        if v is None:
            return None
        # bool is an int subclass; it is never a valid encoded temporal value.
        if isinstance(v, bool) or not isinstance(v, int):
            raise TypeError(f"Field {name!r} is not an integer value: {type(v).__name__}")
        return v

    def _lookup(self, name: str) -> Field:
        f = self._schema.field(name)
        if f is None:
            raise KeyError(f"{name} is not a valid field name")
        return f

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Struct):
            return NotImplemented
        return self._schema == other._schema and self._values == other._values

    def __repr__(self) -> str:
        body = ",".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"Struct{{{body}}}"


@dataclass(frozen=True, slots=True)
class RecordCoordinates:
    topic: str
    partition: Optional[int]
    offset: int

    def describe(self) -> str:
        return f"topic={self.topic};partition={self.partition};offset={self.offset}"


@dataclass(frozen=True, slots=True)
class SinkRecord:
    topic: str
    partition: Optional[int]
    offset: int
    value: Any
    value_schema: Optional[Schema] = None
    key: Any = None
    key_schema: Optional[Schema] = None
    timestamp: Optional[int] = None

    @property
    def coordinates(self) -> RecordCoordinates:
        return RecordCoordinates(topic=str(self.topic), partition=self.partition, offset=int(self.offset))


__all__ = [
    "SchemaType",
    "Field",
    "Schema",
    "STRING_SCHEMA",
    "Struct",
    "RecordCoordinates",
    "SinkRecord",
]
