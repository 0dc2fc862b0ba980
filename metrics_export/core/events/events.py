"""
Export event models.

These events represent immutable facts observed while an export runs.
They are consumed by loggers and recorders.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ExportStartedEvent:
    start: str
    end: str
    interval: str
    chunk_count: int


@dataclass(slots=True)
class ChunkFetchedEvent:
    chunk_index: int
    window_start: str
    window_end: str

    result_count: int
    row_count: int
    staged_bytes: int


@dataclass(slots=True)
class ChunkFailedEvent:
    chunk_index: int
    window_start: str
    window_end: str

    error_kind: str
    message: str


@dataclass(slots=True)
class ExportCompletedEvent:
    chunk_count: int
    row_count: int
    duration_seconds: float
