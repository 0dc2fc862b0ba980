"""
Batched metric export orchestration.

The orchestrator owns the chunk loop: it splits the requested range into
breakpoints, runs one query per consecutive breakpoint pair, and streams the
CSV rows of every chunk to the output sink below a single header line.

Processing is strictly sequential. A chunk is queried only after the
previous chunk has been transformed and written, so rows reach the sink in
chronological chunk order. The first failing chunk aborts the export; rows
already written for earlier chunks stay in the sink.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from metrics_export.core.domain.types import Breakpoints, ChunkWindow, format_csv_line
from metrics_export.core.errors import (
    ChunkQueryFailedError,
    MetricsExportError,
    MissingArgumentsError,
    QueryDocumentNotFoundError,
    TransformFailedError,
)
from metrics_export.core.events.events import (
    ChunkFailedEvent,
    ChunkFetchedEvent,
    ExportCompletedEvent,
    ExportStartedEvent,
)
from metrics_export.core.events.sinks.null_event_bus import NullEventBus
from metrics_export.export.splitter import split_date_range
from metrics_export.export.staging import ChunkStagingBuffer
from metrics_export.export.transformer import to_csv_rows

if TYPE_CHECKING:
    from metrics_export.core.events.event_bus import EventBus
    from metrics_export.core.ports.metrics_query import MetricsQueryClient

LOGGER = logging.getLogger(__name__)

DEFAULT_LABEL = "Successful connections"


@dataclass(frozen=True, slots=True)
class ExportSummary:
    """Outcome of a completed export."""

    breakpoints: Breakpoints
    chunk_count: int
    row_count: int
    duration_seconds: float


def load_query_document(path: str | Path) -> Any:
    """
    Load a JSON query document once for the whole export.

    Raises:
        QueryDocumentNotFoundError: the path is not a readable file, or its
            content is not JSON.
    """
    query_path = Path(path)

    if not query_path.is_file():
        raise QueryDocumentNotFoundError(f'Query file "{path}" not found')

    try:
        raw = query_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise QueryDocumentNotFoundError(f'Query file "{path}" not readable') from exc

    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise QueryDocumentNotFoundError(
            f'Query file "{path}" is not a JSON document: {exc}'
        ) from exc


class MetricQueryOrchestrator:
    """
    Runs one batched export against a metrics query client.

    One orchestrator instance may run several exports; each get_metric_data()
    call is independent and holds no state across calls.
    """

    def __init__(
        self,
        *,
        client: MetricsQueryClient,
        sink: TextIO,
        label: str = DEFAULT_LABEL,
        event_bus: EventBus | None = None,
        scratch_dir: str | Path | None = None,
    ) -> None:
        self._client = client
        self._sink = sink
        self._label = label
        self._event_bus = event_bus if event_bus is not None else NullEventBus()
        self._scratch_dir = scratch_dir

    def get_metric_data(
        self,
        query: Any,
        start_raw: str,
        end_raw: str,
        interval: str,
    ) -> ExportSummary:
        """
        Export ``query`` over ``[start_raw, end_raw]`` in ``interval`` chunks.

        Splitter errors propagate unchanged. A failed chunk query raises
        ChunkQueryFailedError and a malformed chunk response raises
        TransformFailedError; either aborts the remaining chunks.
        """
        if query is None:
            raise QueryDocumentNotFoundError("No query document supplied")

        if not start_raw or not end_raw or not interval:
            raise MissingArgumentsError("Arguments are missing")

        started = time.monotonic()
        breakpoints = split_date_range(start_raw, end_raw, interval)

        self._event_bus.emit(
            ExportStartedEvent(
                start=breakpoints[0],
                end=breakpoints[-1],
                interval=interval,
                chunk_count=breakpoints.chunk_count,
            )
        )

        self._write_line(format_csv_line(("Date", self._label)))

        row_count = 0
        with ChunkStagingBuffer(self._scratch_dir) as buffer:
            for window in breakpoints.windows():
                try:
                    row_count += self._export_chunk(query, window, buffer)
                except MetricsExportError as exc:
                    self._event_bus.emit(
                        ChunkFailedEvent(
                            chunk_index=window.index,
                            window_start=window.start,
                            window_end=window.end,
                            error_kind=exc.kind.name,
                            message=str(exc),
                        )
                    )
                    raise

        duration = time.monotonic() - started
        self._event_bus.emit(
            ExportCompletedEvent(
                chunk_count=breakpoints.chunk_count,
                row_count=row_count,
                duration_seconds=duration,
            )
        )

        return ExportSummary(
            breakpoints=breakpoints,
            chunk_count=breakpoints.chunk_count,
            row_count=row_count,
            duration_seconds=duration,
        )

    # ------------------------------------------------------------------

    def _export_chunk(
        self,
        query: Any,
        window: ChunkWindow,
        buffer: ChunkStagingBuffer,
    ) -> int:
        try:
            response = self._client.get_metric_data(
                query=query,
                start=window.start,
                end=window.end,
            )
        except Exception as exc:
            raise ChunkQueryFailedError(
                f"Metrics query failed for {window.start} -> {window.end}: {exc}"
            ) from exc

        try:
            staged_bytes = buffer.stage(response)
        except (TypeError, ValueError) as exc:
            raise TransformFailedError(
                f"Response for {window.start} -> {window.end} is not JSON-compatible"
            ) from exc

        rows = to_csv_rows(buffer.load())

        for row in rows:
            self._write_line(row.render())
        self._flush()
        LOGGER.debug(
            "Chunk exported",
            extra={"chunk": window.index, "start": window.start, "rows": len(rows)},
        )

        self._event_bus.emit(
            ChunkFetchedEvent(
                chunk_index=window.index,
                window_start=window.start,
                window_end=window.end,
                result_count=_result_count(response),
                row_count=len(rows),
                staged_bytes=staged_bytes,
            )
        )

        return len(rows)

    def _write_line(self, line: str) -> None:
        self._sink.write(line + "\n")

    def _flush(self) -> None:
        flush_fn = getattr(self._sink, "flush", None)
        if callable(flush_fn):
            flush_fn()


def _result_count(response: Any) -> int:
    if isinstance(response, dict):
        response = response.get("MetricDataResults", [response])
    return len(response) if isinstance(response, list) else 1


def get_metric_data(
    query: Any,
    start_raw: str,
    end_raw: str,
    interval: str,
    *,
    client: MetricsQueryClient,
    sink: TextIO,
    label: str = DEFAULT_LABEL,
    event_bus: EventBus | None = None,
) -> ExportSummary:
    """Functional shorthand for a single MetricQueryOrchestrator run."""
    orchestrator = MetricQueryOrchestrator(
        client=client,
        sink=sink,
        label=label,
        event_bus=event_bus,
    )
    return orchestrator.get_metric_data(query, start_raw, end_raw, interval)
