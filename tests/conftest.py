from __future__ import annotations

import pytest

from influx_sink.diagnostics import CollectingDiagnosticSink
from influx_sink.point import PointDraft


@pytest.fixture
def sink() -> CollectingDiagnosticSink:
    return CollectingDiagnosticSink()


@pytest.fixture
def draft() -> PointDraft:
    return PointDraft(measurement="cpu")
