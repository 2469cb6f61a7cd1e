from __future__ import annotations

from typing import Any, Optional


class TagExtractionError(ValueError):
    """Base class for errors that abort tag extraction for a whole record."""


class UnsupportedValueTypeError(TagExtractionError):
    def __init__(self, value: Any) -> None:
        self.value_type = type(value).__name__
        super().__init__(
            f"Unsupported schemaless value type: {self.value_type}. "
            "For schemaless records only Map types are supported"
        )


class UnsupportedSchemaError(TagExtractionError):
    def __init__(self, schema_type: Any, *, detail: Optional[str] = None) -> None:
        self.schema_type = schema_type
        name = getattr(schema_type, "value", schema_type)
        msg = f"Unsupported schema type: {name} schema is not supported"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class InvalidJsonPayloadError(TagExtractionError):
    def __init__(self, *, topic: str, offset: int) -> None:
        self.topic = topic
        self.offset = offset
        super().__init__(f"Invalid json with the record on topic {topic} and offset {offset}")


class LogicalTypeError(TagExtractionError):
    """Raised when a logical-type field cannot be decoded from its encoded form."""


__all__ = [
    "TagExtractionError",
    "UnsupportedValueTypeError",
    "UnsupportedSchemaError",
    "InvalidJsonPayloadError",
    "LogicalTypeError",
]
