"""
Tag extraction for records delivered to the InfluxDB sink.

Typical use:

    point = resolve_tags(record, parse_tag_clause("region, env=prod"), PointDraft("cpu"))
"""

from __future__ import annotations

from influx_sink.errors import (
    InvalidJsonPayloadError,
    LogicalTypeError,
    TagExtractionError,
    UnsupportedSchemaError,
    UnsupportedValueTypeError,
)
from influx_sink.point import PointBuilder, PointDraft
from influx_sink.records import Field, RecordCoordinates, Schema, SchemaType, SinkRecord, Struct
from influx_sink.tag_spec import TagSpec, parse_tag_clause
from influx_sink.tags_extractor import resolve_tags

__all__ = [
    "Field",
    "InvalidJsonPayloadError",
    "LogicalTypeError",
    "PointBuilder",
    "PointDraft",
    "RecordCoordinates",
    "Schema",
    "SchemaType",
    "SinkRecord",
    "Struct",
    "TagExtractionError",
    "TagSpec",
    "UnsupportedSchemaError",
    "UnsupportedValueTypeError",
    "parse_tag_clause",
    "resolve_tags",
]
