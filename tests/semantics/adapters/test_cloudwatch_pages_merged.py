"""
Semantic test: CloudWatch result pages are merged per query id.

Invariant:
GetMetricData pagination is invisible to the export engine: each query Id
yields one result whose timestamps/values are the concatenation of all pages,
and the chunk window is forwarded as UTC datetimes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from metrics_export.io.cloudwatch_adapter import CloudWatchMetricsClient


class _FakePaginator:
    def __init__(self, pages: list[dict[str, Any]]) -> None:
        self._pages = pages
        self.kwargs: dict[str, Any] = {}

    def paginate(self, **kwargs: Any) -> list[dict[str, Any]]:
        self.kwargs = kwargs
        return self._pages


class _FakeCloudWatch:
    def __init__(self, pages: list[dict[str, Any]]) -> None:
        self.paginator = _FakePaginator(pages)
        self.operation: str | None = None

    def get_paginator(self, operation: str) -> _FakePaginator:
        self.operation = operation
        return self.paginator


def _ts(hour: int) -> datetime:
    return datetime(2025, 1, 1, hour, tzinfo=timezone.utc)


def test_pages_are_merged_per_id() -> None:
    fake = _FakeCloudWatch(
        [
            {
                "MetricDataResults": [
                    {"Id": "m1", "Label": "ok", "Timestamps": [_ts(3), _ts(2)], "Values": [3.0, 2.0], "StatusCode": "PartialData"},
                    {"Id": "m2", "Label": "fail", "Timestamps": [_ts(3)], "Values": [9.0], "StatusCode": "PartialData"},
                ],
                "NextToken": "abc",
            },
            {
                "MetricDataResults": [
                    {"Id": "m1", "Label": "ok", "Timestamps": [_ts(1)], "Values": [1.0], "StatusCode": "Complete"},
                ],
            },
        ]
    )
    client = CloudWatchMetricsClient(client=fake)
    query = [{"Id": "m1", "Expression": "x"}, {"Id": "m2", "Expression": "y"}]

    results = client.get_metric_data(
        query=query,
        start="2025-01-01T00:00:00Z",
        end="2025-01-01T04:00:00Z",
    )

    assert fake.operation == "get_metric_data"
    assert fake.paginator.kwargs == {
        "MetricDataQueries": query,
        "StartTime": datetime(2025, 1, 1, 0, tzinfo=timezone.utc),
        "EndTime": datetime(2025, 1, 1, 4, tzinfo=timezone.utc),
    }
    assert results == [
        {"Id": "m1", "Label": "ok", "Timestamps": [_ts(3), _ts(2), _ts(1)], "Values": [3.0, 2.0, 1.0], "StatusCode": "Complete"},
        {"Id": "m2", "Label": "fail", "Timestamps": [_ts(3)], "Values": [9.0], "StatusCode": "PartialData"},
    ]


def test_cli_input_json_shape_is_unwrapped() -> None:
    fake = _FakeCloudWatch([{"MetricDataResults": []}])
    queries = [{"Id": "m1", "Expression": "x"}]

    results = CloudWatchMetricsClient(client=fake).get_metric_data(
        query={"MetricDataQueries": queries},
        start="2025-01-01T00:00:00Z",
        end="2025-01-02T00:00:00Z",
    )

    assert results == []
    assert fake.paginator.kwargs["MetricDataQueries"] is queries
