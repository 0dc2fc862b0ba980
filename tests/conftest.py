from __future__ import annotations

from typing import Any, Callable

import pytest


class FakeMetricsClient:
    """In-memory MetricsQueryClient. Responses are computed per window."""

    def __init__(self, respond: Callable[[str, str], Any]) -> None:
        self._respond = respond
        self.calls: list[tuple[Any, str, str]] = []

    def get_metric_data(self, *, query: Any, start: str, end: str) -> Any:
        self.calls.append((query, start, end))
        return self._respond(start, end)


def hourly_series(start: str, end: str) -> list[dict[str, Any]]:
    """One metric with a point at each window boundary, newest first."""
    return [
        {
            "Id": "m1",
            "Label": "Successful connections",
            "Timestamps": [end, start],
            "Values": [2.0, 1.0],
            "StatusCode": "Complete",
        }
    ]


@pytest.fixture
def fake_client_factory() -> Callable[[Callable[[str, str], Any]], FakeMetricsClient]:
    return FakeMetricsClient


@pytest.fixture
def hourly_client() -> FakeMetricsClient:
    return FakeMetricsClient(hourly_series)


@pytest.fixture
def query_document() -> list[dict[str, str]]:
    return [{"Id": "m1", "Expression": "SUM(SEARCH('x', 'Sum', 3600))", "Label": "Successful connections"}]
