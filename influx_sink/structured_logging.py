"""
Structured JSON logging for the sink (stdlib-only).

Goals:
- One JSON object per log line (stdout)
- Consistent core fields: service, env, version, sha, event_type, severity
- Record context (topic/partition/offset) bound for the duration of one record
  and stamped onto every line emitted while it is being processed
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from influx_sink.records import RecordCoordinates


_RECORD: ContextVar[Optional[RecordCoordinates]] = ContextVar("record_coordinates", default=None)

# Attributes every LogRecord carries; anything else on a record came from `extra=`.
_LOGRECORD_ATTRS: frozenset[str] = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}
_CORE_FIELDS: frozenset[str] = frozenset({"event_type", "topic", "partition", "offset"})


def _one_line(v: Any, *, max_len: int) -> str:
    s = "" if v is None else str(v).replace("\n", " ").replace("\r", " ").strip()
    return s if len(s) <= max_len else s[: max_len - 1] + "…"


def get_record_coordinates() -> Optional[RecordCoordinates]:
    return _RECORD.get()


@contextmanager
def bind_record(coordinates: RecordCoordinates) -> Iterator[RecordCoordinates]:
    token = _RECORD.set(coordinates)
    try:
        yield coordinates
    finally:
        _RECORD.reset(token)


class JsonLogFormatter(logging.Formatter):
    """
    Service identity is fixed at construction; `config.Settings` resolves it from the environment.
    """

    def __init__(
        self,
        *,
        service: str = "influx-sink",
        env: str = "unknown",
        version: str = "unknown",
        sha: str = "unknown",
    ) -> None:
        super().__init__()
        self._identity = {
            "service": _one_line(service, max_len=128) or "influx-sink",
            "env": _one_line(env, max_len=64) or "unknown",
            "version": _one_line(version, max_len=128) or "unknown",
            "sha": _one_line(sha, max_len=64) or "unknown",
        }

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (format required by logging)
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": record.levelname,
            **self._identity,
            "event_type": _one_line(getattr(record, "event_type", None), max_len=128) or "log",
            "message": _one_line(record.getMessage(), max_len=4000),
            "logger": record.name,
        }

        bound = get_record_coordinates()
        for k in ("topic", "partition", "offset"):
            v = getattr(record, k, None)
            if v is None and bound is not None:
                v = getattr(bound, k)
            if v is not None:
                payload[k] = v

        if record.exc_info:
            payload["exception"] = "".join(traceback.format_exception(*record.exc_info))[-8000:]

        for k, v in record.__dict__.items():
            if k in _LOGRECORD_ATTRS or k in _CORE_FIELDS or k.startswith("_"):
                continue
            payload.setdefault(str(k), v)

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def init_structured_logging(
    *,
    service: str = "influx-sink",
    env: str = "unknown",
    version: str = "unknown",
    sha: str = "unknown",
    level: str | int = "INFO",
) -> None:
    """
    Configure stdlib logging to emit JSON lines to stdout.

    Safe to call multiple times (last call wins).
    """
    root = logging.getLogger()
    root.setLevel(level)

    root.handlers = []
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JsonLogFormatter(service=service, env=env, version=version, sha=sha))
    root.addHandler(handler)

    logging.captureWarnings(True)


def log_event(
    logger: logging.Logger,
    event_type: str,
    *,
    severity: str = "INFO",
    message: str | None = None,
    **fields: Any,
) -> None:
    """
    Convenience wrapper for semantic events with stable `event_type`.
    """
    lvl = getattr(logging, str(severity).upper(), logging.INFO)
    logger.log(
        lvl,
        message or event_type,
        extra={"event_type": _one_line(event_type, max_len=128), **fields},
    )


__all__ = [
    "JsonLogFormatter",
    "bind_record",
    "get_record_coordinates",
    "init_structured_logging",
    "log_event",
]
