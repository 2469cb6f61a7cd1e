from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Protocol, runtime_checkable

from influx_sink.records import RecordCoordinates
from influx_sink.structured_logging import log_event


logger = logging.getLogger("influx_sink.tags")

TAG_SKIPPED_EVENT = "influx.tag_skipped"


def skipped_tag_message(key: str, coordinates: RecordCoordinates) -> str:
    return (
        f"Tag can't be set because field:{key} can't be found or is null on the incoming value. "
        f"{coordinates.describe()}"
    )


@runtime_checkable
class DiagnosticSink(Protocol):
    """Receives one warning per skipped tag. Must not raise."""

    def tag_skipped(self, *, key: str, coordinates: RecordCoordinates) -> None:
        ...


class LoggingDiagnosticSink:
    def __init__(self, *, enabled: bool = True, log: logging.Logger | None = None) -> None:
        self.enabled = bool(enabled)
        self._logger = log or logger

    def tag_skipped(self, *, key: str, coordinates: RecordCoordinates) -> None:
        if not self.enabled:
            return
        log_event(
            self._logger,
            TAG_SKIPPED_EVENT,
            severity="WARNING",
            message=skipped_tag_message(key, coordinates),
            tag_key=key,
            topic=coordinates.topic,
            partition=coordinates.partition,
            offset=coordinates.offset,
        )


@dataclass(frozen=True, slots=True)
class SkippedTag:
    key: str
    coordinates: RecordCoordinates

    @property
    def message(self) -> str:
        return skipped_tag_message(self.key, self.coordinates)


@dataclass
class CollectingDiagnosticSink:
    """Keeps skipped-tag diagnostics in memory, in emission order."""

    skipped: List[SkippedTag] = field(default_factory=list)

    def tag_skipped(self, *, key: str, coordinates: RecordCoordinates) -> None:
        self.skipped.append(SkippedTag(key=key, coordinates=coordinates))

    @property
    def keys(self) -> List[str]:
        return [s.key for s in self.skipped]


__all__ = [
    "TAG_SKIPPED_EVENT",
    "DiagnosticSink",
    "LoggingDiagnosticSink",
    "CollectingDiagnosticSink",
    "SkippedTag",
    "skipped_tag_message",
]
