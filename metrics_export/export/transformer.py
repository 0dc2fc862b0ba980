"""
Query response to CSV row transformation.

Each metric result in a response becomes one contiguous block of rows,
sorted by timestamp. Blocks keep the order in which the results appear in
the response and are never merged with each other.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from metrics_export.core.domain.dates import DATESPEC_FORMAT, DateSpec
from metrics_export.core.domain.types import CsvRow, MetricResult
from metrics_export.core.errors import TransformFailedError


def format_timestamp(value: datetime) -> DateSpec:
    # naive timestamps are taken as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(DATESPEC_FORMAT)


def format_value(value: float) -> str:
    """Render a metric value the way jq does: ``3.0`` -> ``3``."""
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)


def _iter_results(response: Any) -> Iterable[Any]:
    if isinstance(response, Mapping):
        if "MetricDataResults" not in response:
            raise TransformFailedError(
                "Response has no MetricDataResults; "
                f"got keys {sorted(map(str, response))}"
            )
        response = response["MetricDataResults"]

    if not isinstance(response, list):
        raise TransformFailedError(
            f"Response must be a list of metric results, got {type(response).__name__}"
        )
    return response


def result_to_rows(result: MetricResult) -> list[CsvRow]:
    """Pair timestamps with values positionally and sort by timestamp."""
    if not result.is_paired():
        raise TransformFailedError(
            f"Metric result {result.Id or result.Label!r} has "
            f"{len(result.Timestamps)} timestamps but {len(result.Values)} values"
        )

    rows = [
        CsvRow(timestamp=format_timestamp(ts), value=format_value(value))
        for ts, value in zip(result.Timestamps, result.Values)
    ]
    rows.sort(key=lambda row: row.timestamp)
    return rows


def to_csv_rows(response: Any) -> list[CsvRow]:
    """
    Convert one chunk's query response into CSV rows.

    ``response`` is either a list of metric results or a mapping carrying
    them under ``MetricDataResults``. Each result may be a dict or an already
    validated MetricResult.

    Raises:
        TransformFailedError: the response or one of its results has an
            unexpected shape, or a result's arrays differ in length.
    """
    rows: list[CsvRow] = []

    for position, raw in enumerate(_iter_results(response)):
        if isinstance(raw, MetricResult):
            result = raw
        else:
            try:
                result = MetricResult.model_validate(raw)
            except ValidationError as exc:
                raise TransformFailedError(
                    f"Metric result #{position} is malformed: {exc}"
                ) from exc

        rows.extend(result_to_rows(result))

    return rows
