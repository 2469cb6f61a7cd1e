"""
Resolve declared tags against one inbound record and attach them to a point builder.

Per tag, in declaration order:
- constant tags are attached verbatim (no lookup, never a diagnostic)
- field tags are looked up on the record value; a missing field and a null value
  are treated the same: one warning on the diagnostic sink, tag skipped
- found values are attached as `str(value)`

Tag values are resolved first and attached afterwards, so a fatal error
(unsupported shape, invalid JSON, undecodable logical value) leaves the builder untouched.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Callable, List, Optional, Sequence, Tuple

from influx_sink.diagnostics import DiagnosticSink, LoggingDiagnosticSink
from influx_sink.errors import InvalidJsonPayloadError, LogicalTypeError
from influx_sink.logical_types import (
    LogicalType,
    decode_date,
    decode_decimal,
    decode_time,
    decode_timestamp,
    format_date,
    format_time,
)
from influx_sink.payload import SchemaLessPayload, StructuredPayload, TextualPayload, resolve_shape
from influx_sink.point import PointBuilder
from influx_sink.records import Field, RecordCoordinates, SinkRecord, Struct
from influx_sink.structured_logging import bind_record
from influx_sink.tag_spec import TagSpec


JsonLoads = Callable[[str], Any]
Lookup = Callable[[str], Any]

_DEFAULT_SINK = LoggingDiagnosticSink()


def _resolve_values(
    tags: Sequence[TagSpec],
    lookup: Lookup,
    *,
    coordinates: RecordCoordinates,
    sink: DiagnosticSink,
) -> List[Tuple[str, str]]:
    resolved: List[Tuple[str, str]] = []
    for t in tags:
        if t.is_constant:
            resolved.append((t.key, str(t.value)))
            continue
        value = lookup(t.key)
        if value is None:
            sink.tag_skipped(key=t.key, coordinates=coordinates)
            continue
        resolved.append((t.key, str(value)))
    return resolved


def _attach(builder: PointBuilder, resolved: Sequence[Tuple[str, str]]) -> PointBuilder:
    pb = builder
    for key, value in resolved:
        pb = pb.tag(key, value)
    return pb


def extract_from_map(
    mapping: Mapping[str, Any],
    tags: Sequence[TagSpec],
    builder: PointBuilder,
    *,
    coordinates: RecordCoordinates,
    sink: Optional[DiagnosticSink] = None,
) -> PointBuilder:
    resolved = _resolve_values(tags, mapping.get, coordinates=coordinates, sink=sink or _DEFAULT_SINK)
    return _attach(builder, resolved)


def extract_from_json(
    text: Optional[str],
    tags: Sequence[TagSpec],
    builder: PointBuilder,
    *,
    coordinates: RecordCoordinates,
    sink: Optional[DiagnosticSink] = None,
    json_loads: Optional[JsonLoads] = None,
) -> PointBuilder:
    """
    The JSON text is parsed on the first field tag and reused for the rest of the record.
    A record whose tags are all constants never parses its payload.
    """
    loads = json_loads or json.loads
    parsed: Optional[Mapping[str, Any]] = None

    def _lookup(key: str) -> Any:
        nonlocal parsed
        if parsed is None:
            try:
                decoded = loads(text)  # type: ignore[arg-type]
            except Exception as e:
                raise InvalidJsonPayloadError(topic=coordinates.topic, offset=coordinates.offset) from e
            if not isinstance(decoded, Mapping):
                raise InvalidJsonPayloadError(topic=coordinates.topic, offset=coordinates.offset)
            parsed = decoded
        return parsed.get(key)

    resolved = _resolve_values(tags, _lookup, coordinates=coordinates, sink=sink or _DEFAULT_SINK)
    return _attach(builder, resolved)


def _as_utc_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def _decode_struct_field(struct: Struct, f: Field) -> Any:
    logical = LogicalType.of(f.schema)
    if logical is None:
        return struct.get(f.name)

    raw = struct.get(f.name)
    if raw is None:
        return None
    try:
        if logical is LogicalType.DECIMAL:
            if isinstance(raw, Decimal):
                return raw
            return decode_decimal(f.schema, struct.get_bytes(f.name))
        if logical is LogicalType.DATE:
            if isinstance(raw, date):
                return format_date(_as_utc_datetime(raw))
            return format_date(decode_date(struct.get_int32(f.name)))  # type: ignore[arg-type]
        if logical is LogicalType.TIME:
            if isinstance(raw, datetime):
                return format_time(_as_utc_datetime(raw))
            if isinstance(raw, time):
                return format_time(datetime.combine(date(1970, 1, 1), raw, tzinfo=raw.tzinfo or timezone.utc))
            return format_time(decode_time(struct.get_int32(f.name)))  # type: ignore[arg-type]
        if logical is LogicalType.TIMESTAMP:
            if isinstance(raw, date):
                return format_date(_as_utc_datetime(raw))
            return format_date(decode_timestamp(struct.get_int64(f.name)))  # type: ignore[arg-type]
    except TypeError as e:
        raise LogicalTypeError(f"Cannot decode field {f.name!r} as {logical.name}: {e}") from e
    raise LogicalTypeError(f"Unhandled logical type: {logical.value}")


def extract_from_struct(
    record: SinkRecord,
    tags: Sequence[TagSpec],
    builder: PointBuilder,
    *,
    sink: Optional[DiagnosticSink] = None,
) -> PointBuilder:
    struct: Struct = record.value

    def _lookup(key: str) -> Any:
        f = struct.schema.field(key)
        if f is None:
            return None
        return _decode_struct_field(struct, f)

    resolved = _resolve_values(tags, _lookup, coordinates=record.coordinates, sink=sink or _DEFAULT_SINK)
    return _attach(builder, resolved)


def resolve_tags(
    record: SinkRecord,
    tags: Sequence[TagSpec],
    builder: PointBuilder,
    *,
    sink: Optional[DiagnosticSink] = None,
    json_loads: Optional[JsonLoads] = None,
) -> PointBuilder:
    """
    Attach every declared tag that can be resolved on `record` to `builder`.

    Returns the builder handle produced by the last `tag()` call (or `builder`
    itself when nothing was attached).

    Raises:
    - UnsupportedValueTypeError: schemaless value that is not a mapping
    - UnsupportedSchemaError: value schema other than STRING / STRUCT
    - InvalidJsonPayloadError: STRING payload that is not a JSON object
    - LogicalTypeError: logical-type field that cannot be decoded
    """
    coordinates = record.coordinates
    with bind_record(coordinates):
        shape = resolve_shape(record)
        if isinstance(shape, SchemaLessPayload):
            return extract_from_map(shape.mapping, tags, builder, coordinates=coordinates, sink=sink)
        if isinstance(shape, TextualPayload):
            return extract_from_json(
                shape.text, tags, builder, coordinates=coordinates, sink=sink, json_loads=json_loads
            )
        if isinstance(shape, StructuredPayload):
            return extract_from_struct(record, tags, builder, sink=sink)
    raise TypeError(f"Unhandled payload shape: {type(shape).__name__}")


__all__ = [
    "extract_from_map",
    "extract_from_json",
    "extract_from_struct",
    "resolve_tags",
]
