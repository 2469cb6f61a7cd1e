"""
Logical types carried by structured records.

Encoded forms:
- Decimal:   big-endian two's-complement unscaled bytes + `scale` schema parameter
- Date:      int days since 1970-01-01
- Time:      int milliseconds since midnight
- Timestamp: int milliseconds since the epoch

Rendering is fixed and always UTC:
- date / timestamp: yyyy-MM-dd'T'HH:mm:ss.SSSZ  (e.g. 1970-01-01T00:00:00.000+0000)
- time:             HH:mm:ss.SSSZ               (e.g. 00:00:01.500+0000)
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, localcontext
from enum import Enum
from typing import Optional

from influx_sink.errors import LogicalTypeError
from influx_sink.records import Schema, SchemaType


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MILLIS_PER_DAY = 24 * 60 * 60 * 1000

SCALE_PARAMETER = "scale"


class LogicalType(str, Enum):
    DECIMAL = "org.apache.kafka.connect.data.Decimal"
    DATE = "org.apache.kafka.connect.data.Date"
    TIME = "org.apache.kafka.connect.data.Time"
    TIMESTAMP = "org.apache.kafka.connect.data.Timestamp"

    @classmethod
    def of(cls, schema: Schema) -> Optional["LogicalType"]:
        if not schema.name:
            return None
        try:
            return cls(schema.name)
        except ValueError:
            return None


def decimal_schema(scale: int, *, optional: bool = False) -> Schema:
    return Schema(
        type=SchemaType.BYTES,
        name=LogicalType.DECIMAL.value,
        parameters={SCALE_PARAMETER: str(int(scale))},
        optional=optional,
    )


def date_schema(*, optional: bool = False) -> Schema:
    return Schema(type=SchemaType.INT32, name=LogicalType.DATE.value, optional=optional)


def time_schema(*, optional: bool = False) -> Schema:
    return Schema(type=SchemaType.INT32, name=LogicalType.TIME.value, optional=optional)


def timestamp_schema(*, optional: bool = False) -> Schema:
    return Schema(type=SchemaType.INT64, name=LogicalType.TIMESTAMP.value, optional=optional)


def _scale_of(schema: Schema) -> int:
    raw = (schema.parameters or {}).get(SCALE_PARAMETER)
    if raw is None or not str(raw).strip():
        raise LogicalTypeError("Invalid Decimal schema: scale parameter not found.")
    try:
        return int(str(raw).strip())
    except ValueError as e:
        raise LogicalTypeError(f"Invalid Decimal schema: scale parameter is not an integer: {raw!r}") from e


def decode_decimal(schema: Schema, raw: Optional[bytes]) -> Optional[Decimal]:
    if raw is None:
        return None
    scale = _scale_of(schema)
    unscaled = int.from_bytes(raw, byteorder="big", signed=True)
    # Tuple construction is exact; scaleb would round to the context precision.
    digits = tuple(int(d) for d in str(abs(unscaled)))
    return Decimal((1 if unscaled < 0 else 0, digits, -scale))


def encode_decimal(schema: Schema, value: Decimal) -> bytes:
    scale = _scale_of(schema)
    value = Decimal(value)
    with localcontext() as ctx:
        ctx.prec = len(value.as_tuple().digits) + abs(scale) + 1
        unscaled = int(value.scaleb(scale).to_integral_value())
    magnitude = unscaled if unscaled >= 0 else ~unscaled
    length = magnitude.bit_length() // 8 + 1
    return unscaled.to_bytes(length, byteorder="big", signed=True)


def _from_epoch(*, days: int = 0, milliseconds: int = 0) -> datetime:
    try:
        return EPOCH + timedelta(days=days, milliseconds=milliseconds)
    except OverflowError as e:
        raise LogicalTypeError(f"Encoded temporal value out of range: days={days} milliseconds={milliseconds}") from e


def decode_date(days: Optional[int]) -> Optional[datetime]:
    if days is None:
        return None
    return _from_epoch(days=int(days))


def decode_time(millis: Optional[int]) -> Optional[datetime]:
    if millis is None:
        return None
    ms = int(millis)
    if ms < 0 or ms >= MILLIS_PER_DAY:
        raise LogicalTypeError("Time values must use number of milliseconds greater than 0 and less than 86400000")
    return _from_epoch(milliseconds=ms)


def decode_timestamp(millis: Optional[int]) -> Optional[datetime]:
    if millis is None:
        return None
    return _from_epoch(milliseconds=int(millis))


def date_to_days(value: date) -> int:
    return (value - EPOCH.date()).days


def time_to_millis(value: time) -> int:
    return ((value.hour * 60 + value.minute) * 60 + value.second) * 1000 + value.microsecond // 1000


def datetime_to_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value.astimezone(timezone.utc) - EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def _millis_and_zone(dt: datetime) -> str:
    return f".{dt.microsecond // 1000:03d}+0000"


def format_time(dt: datetime) -> str:
    dt = dt.astimezone(timezone.utc)
    return f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}" + _millis_and_zone(dt)


def format_date(dt: datetime) -> str:
    # strftime("%Y") does not zero-pad years below 1000 on every platform.
    dt = dt.astimezone(timezone.utc)
    return f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}T" + format_time(dt)


__all__ = [
    "EPOCH",
    "LogicalType",
    "decimal_schema",
    "date_schema",
    "time_schema",
    "timestamp_schema",
    "decode_decimal",
    "encode_decimal",
    "decode_date",
    "decode_time",
    "decode_timestamp",
    "date_to_days",
    "time_to_millis",
    "datetime_to_millis",
    "format_date",
    "format_time",
]
