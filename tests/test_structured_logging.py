from __future__ import annotations

import json
import logging

from influx_sink.diagnostics import LoggingDiagnosticSink, skipped_tag_message
from influx_sink.records import RecordCoordinates
from influx_sink.structured_logging import JsonLogFormatter, bind_record, get_record_coordinates, log_event


def _format(record: logging.LogRecord) -> dict:
    fmt = JsonLogFormatter(service="influx-sink", env="test", version="1.2.3", sha="abc")
    return json.loads(fmt.format(record))


def _make_record(msg: str, **extra) -> logging.LogRecord:
    rec = logging.LogRecord("influx_sink.tags", logging.WARNING, __file__, 1, msg, None, None)
    for k, v in extra.items():
        setattr(rec, k, v)
    return rec


def test_formatter_core_fields_and_extras() -> None:
    out = _format(_make_record("hello", event_type="influx.tag_skipped", tag_key="host"))
    assert out["severity"] == "WARNING"
    assert out["service"] == "influx-sink"
    assert out["env"] == "test"
    assert out["version"] == "1.2.3"
    assert out["sha"] == "abc"
    assert out["event_type"] == "influx.tag_skipped"
    assert out["message"] == "hello"
    assert out["tag_key"] == "host"
    assert "timestamp" in out


def test_formatter_defaults_event_type_to_log() -> None:
    assert _format(_make_record("plain"))["event_type"] == "log"


def test_formatter_stamps_bound_record_coordinates() -> None:
    coords = RecordCoordinates(topic="metrics", partition=1, offset=10)
    with bind_record(coords):
        assert get_record_coordinates() == coords
        out = _format(_make_record("inside"))
    assert (out["topic"], out["partition"], out["offset"]) == ("metrics", 1, 10)
    assert get_record_coordinates() is None
    assert "topic" not in _format(_make_record("outside"))


def test_log_event_sets_event_type(caplog) -> None:
    lg = logging.getLogger("influx_sink.test")
    caplog.set_level(logging.INFO, logger="influx_sink.test")
    log_event(lg, "influx.example", severity="INFO", answer=42)
    assert caplog.records[-1].event_type == "influx.example"
    assert caplog.records[-1].answer == 42


def test_logging_sink_emits_warning(caplog) -> None:
    coords = RecordCoordinates(topic="metrics", partition=0, offset=5)
    caplog.set_level(logging.WARNING, logger="influx_sink.tags")
    LoggingDiagnosticSink().tag_skipped(key="host", coordinates=coords)
    rec = caplog.records[-1]
    assert rec.getMessage() == skipped_tag_message("host", coords)
    assert rec.topic == "metrics" and rec.partition == 0 and rec.offset == 5


def test_logging_sink_can_be_disabled(caplog) -> None:
    caplog.set_level(logging.WARNING, logger="influx_sink.tags")
    LoggingDiagnosticSink(enabled=False).tag_skipped(
        key="host", coordinates=RecordCoordinates(topic="t", partition=0, offset=0)
    )
    assert [r for r in caplog.records if r.name == "influx_sink.tags"] == []


def test_formatter_extras_cannot_override_identity() -> None:
    out = _format(_make_record("x", service="spoofed", env="other", tag_key="k"))
    assert out["service"] == "influx-sink"
    assert out["env"] == "test"
    assert out["tag_key"] == "k"


def test_formatter_defaults_without_identity() -> None:
    out = json.loads(JsonLogFormatter().format(_make_record("x")))
    assert out["service"] == "influx-sink"
    assert out["env"] == "unknown"
    assert out["severity"] == "WARNING"
