"""Core shared data models.

``MetricResult`` mirrors one entry of a CloudWatch ``MetricDataResults``
list. It is deliberately permissive about extra keys (``Messages``,
``StatusCode`` variants, backend-specific fields) because responses are
produced by external services; only the parallel timestamp/value arrays are
load-bearing.
"""

# pylint: disable=missing-class-docstring,missing-function-docstring
from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field

from metrics_export.core.domain.dates import DateSpec

# ---------------------------------------------------------------------------
# Query results
# ---------------------------------------------------------------------------


class MetricResult(BaseModel):
    Id: str | None = None
    Label: str | None = None
    Timestamps: list[datetime] = Field(default_factory=list)
    Values: list[float] = Field(default_factory=list)
    StatusCode: str | None = None

    model_config = ConfigDict(extra="allow")

    def is_paired(self) -> bool:
        return len(self.Timestamps) == len(self.Values)


# ---------------------------------------------------------------------------
# Breakpoints
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ChunkWindow:
    """Time window of one chunk query, ``start`` < ``end``."""

    index: int
    start: DateSpec
    end: DateSpec


@dataclass(frozen=True, slots=True)
class Breakpoints:
    """
    Strictly increasing chunk boundaries.

    The first element is the range start, the last element is the range end.
    """

    points: tuple[DateSpec, ...]

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[DateSpec]:
        return iter(self.points)

    def __getitem__(self, index: int) -> DateSpec:
        return self.points[index]

    @property
    def chunk_count(self) -> int:
        return max(len(self.points) - 1, 0)

    def windows(self) -> Iterator[ChunkWindow]:
        for index in range(self.chunk_count):
            yield ChunkWindow(
                index=index,
                start=self.points[index],
                end=self.points[index + 1],
            )


# ---------------------------------------------------------------------------
# CSV output
# ---------------------------------------------------------------------------


def format_csv_line(fields: list[object] | tuple[object, ...]) -> str:
    """Render fields as one CSV line, without terminator, every field quoted."""
    buffer = io.StringIO()
    csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n").writerow(fields)
    return buffer.getvalue().removesuffix("\n")


@dataclass(frozen=True, slots=True, order=True)
class CsvRow:
    timestamp: DateSpec
    value: str

    def render(self) -> str:
        return format_csv_line((self.timestamp, self.value))
