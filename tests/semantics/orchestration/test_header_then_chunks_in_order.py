"""
Semantic test: the export streams one header, then every chunk in order.

Invariant:
Exactly one header line precedes all data rows; chunks are queried once
each, in breakpoint order, with the unmodified query document; rows reach
the sink in chunk order.
"""

from __future__ import annotations

import io

from metrics_export.export.orchestrator import MetricQueryOrchestrator, get_metric_data


def test_header_and_rows_in_chunk_order(hourly_client, query_document) -> None:
    sink = io.StringIO()
    orchestrator = MetricQueryOrchestrator(client=hourly_client, sink=sink)

    summary = orchestrator.get_metric_data(
        query_document,
        "2025-01-01T00:00:00Z",
        "2025-01-01T03:00:00Z",
        "1 hour",
    )

    assert sink.getvalue().splitlines() == [
        '"Date","Successful connections"',
        '"2025-01-01T00:00:00Z","1"',
        '"2025-01-01T01:00:00Z","2"',
        '"2025-01-01T01:00:00Z","1"',
        '"2025-01-01T02:00:00Z","2"',
        '"2025-01-01T02:00:00Z","1"',
        '"2025-01-01T03:00:00Z","2"',
    ]
    assert summary.chunk_count == 3
    assert summary.row_count == 6


def test_each_window_queried_once_with_same_document(hourly_client, query_document) -> None:
    get_metric_data(
        query_document,
        "2023-01-01",
        "2024-01-01",
        "3 months",
        client=hourly_client,
        sink=io.StringIO(),
    )

    assert [(start, end) for _, start, end in hourly_client.calls] == [
        ("2023-01-01T00:00:00Z", "2023-04-01T00:00:00Z"),
        ("2023-04-01T00:00:00Z", "2023-07-01T00:00:00Z"),
        ("2023-07-01T00:00:00Z", "2023-10-01T00:00:00Z"),
        ("2023-10-01T00:00:00Z", "2024-01-01T00:00:00Z"),
    ]
    assert all(query is query_document for query, _, _ in hourly_client.calls)


def test_custom_label_in_header(hourly_client, query_document) -> None:
    sink = io.StringIO()

    get_metric_data(
        query_document,
        "2025-01-01",
        "2025-01-02",
        "1 day",
        client=hourly_client,
        sink=sink,
        label='CPU "max"',
    )

    assert sink.getvalue().splitlines()[0] == '"Date","CPU ""max"""'


def test_empty_chunks_still_write_header(fake_client_factory, query_document) -> None:
    client = fake_client_factory(lambda start, end: [])
    sink = io.StringIO()

    summary = get_metric_data(
        query_document, "2025-01-01", "2025-01-03", "1 day", client=client, sink=sink
    )

    assert sink.getvalue() == '"Date","Successful connections"\n'
    assert summary.row_count == 0
    assert len(client.calls) == 2


def test_rerun_is_byte_identical(hourly_client, query_document) -> None:
    outputs = []
    for _ in range(2):
        sink = io.StringIO()
        get_metric_data(
            query_document, "2025-01-01", "2025-02-15", "1 week", client=hourly_client, sink=sink
        )
        outputs.append(sink.getvalue())

    assert outputs[0] == outputs[1]


def test_chunking_preserves_rows_of_unbounded_query(fake_client_factory, query_document) -> None:
    points = {
        "2025-01-01T00:00:00Z": 1.0,
        "2025-01-01T05:00:00Z": 2.0,
        "2025-01-01T11:00:00Z": 3.0,
        "2025-01-01T17:00:00Z": 4.0,
        "2025-01-01T23:00:00Z": 5.0,
    }

    def respond(start: str, end: str) -> list[dict]:
        selected = [(ts, v) for ts, v in points.items() if start <= ts < end]
        selected.reverse()
        return [
            {
                "Timestamps": [ts for ts, _ in selected],
                "Values": [v for _, v in selected],
            }
        ]

    chunked = io.StringIO()
    get_metric_data(
        query_document,
        "2025-01-01T00:00:00Z",
        "2025-01-02T00:00:00Z",
        "4 hours",
        client=fake_client_factory(respond),
        sink=chunked,
    )

    unbounded = io.StringIO()
    get_metric_data(
        query_document,
        "2025-01-01T00:00:00Z",
        "2025-01-02T00:00:00Z",
        "1 year",
        client=fake_client_factory(respond),
        sink=unbounded,
    )

    assert chunked.getvalue() == unbounded.getvalue()
    assert len(chunked.getvalue().splitlines()) == 1 + len(points)
