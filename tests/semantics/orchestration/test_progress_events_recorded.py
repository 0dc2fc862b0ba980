"""
Semantic test: export progress is recorded as JSON-line events.

Invariant:
A successful export records one started event, one fetched event per
chunk in order, then one completed event. A failed chunk records a failed
event carrying the error kind, and nothing after it.
"""

from __future__ import annotations

import io
import json

import pytest

from metrics_export.core.errors import ChunkQueryFailedError
from metrics_export.core.events.event_bus import EventBus
from metrics_export.core.events.sinks.file_recorder import FileRecorderSink
from metrics_export.export.orchestrator import MetricQueryOrchestrator


def _read_events(path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_successful_export_events(tmp_path, hourly_client, query_document) -> None:
    events_file = tmp_path / "events" / "export.jsonl"

    with EventBus(sinks=[FileRecorderSink(events_file)]) as bus:
        MetricQueryOrchestrator(
            client=hourly_client,
            sink=io.StringIO(),
            event_bus=bus,
        ).get_metric_data(
            query_document,
            "2025-01-01T00:00:00Z",
            "2025-01-01T02:00:00Z",
            "1 hour",
        )

    events = _read_events(events_file)

    assert [event["type"] for event in events] == [
        "ExportStartedEvent",
        "ChunkFetchedEvent",
        "ChunkFetchedEvent",
        "ExportCompletedEvent",
    ]
    assert events[0]["chunk_count"] == 2
    assert [event["chunk_index"] for event in events[1:3]] == [0, 1]
    assert events[2]["window_start"] == "2025-01-01T01:00:00Z"
    assert all(event["row_count"] == 2 for event in events[1:3])
    assert events[-1]["row_count"] == 4


def test_failed_chunk_event(tmp_path, fake_client_factory, query_document) -> None:
    events_file = tmp_path / "export.jsonl"

    def respond(start: str, end: str):
        raise ConnectionError("throttled")

    with EventBus(sinks=[FileRecorderSink(events_file)]) as bus:
        orchestrator = MetricQueryOrchestrator(
            client=fake_client_factory(respond),
            sink=io.StringIO(),
            event_bus=bus,
        )
        with pytest.raises(ChunkQueryFailedError):
            orchestrator.get_metric_data(
                query_document,
                "2025-01-01T00:00:00Z",
                "2025-01-01T02:00:00Z",
                "1 hour",
            )

    events = _read_events(events_file)

    assert [event["type"] for event in events] == ["ExportStartedEvent", "ChunkFailedEvent"]
    assert events[1]["error_kind"] == "CHUNK_QUERY_FAILED"
    assert "throttled" in events[1]["message"]


def test_closed_bus_rejects_new_sinks(tmp_path) -> None:
    bus = EventBus()
    bus.close()
    late = FileRecorderSink(tmp_path / "late.jsonl")

    with pytest.raises(RuntimeError):
        bus.register(late)
    late.close()
