"""
Date range splitting.

This module turns a ``[start, end]`` range and an interval expression into
the ordered breakpoints that bound each chunk query.
"""

from __future__ import annotations

import logging

from metrics_export.core.domain.dates import (
    DateSpec,
    format_datespec,
    parse_interval,
    parse_timestamp,
)
from metrics_export.core.domain.types import Breakpoints
from metrics_export.core.errors import (
    InvalidEndDateError,
    InvalidIntervalError,
    InvalidStartDateError,
    MissingArgumentsError,
    StartAfterEndError,
    StartEqualsEndError,
)

LOGGER = logging.getLogger(__name__)


def split_date_range(
    start_raw: str,
    end_raw: str,
    interval: str,
) -> Breakpoints:
    """
    Split a date range into interval-sized chunks.

    Examples:
        >>> split_date_range("2025-03-02T00:00:00Z", "2025-05-09T00:00:00Z", "10 days")
        >>> split_date_range("2023-01-01", "2025-01-01", "3 months")

    Every gap equals the interval except possibly the last one, which ends
    exactly on the end date. The end date appears once even when a step
    lands on it.

    Raises:
        MissingArgumentsError: an argument is empty.
        InvalidStartDateError / InvalidEndDateError: a date is unparseable.
        InvalidIntervalError: the interval is unparseable or does not move
            the start date forward.
        StartAfterEndError / StartEqualsEndError: the range is empty.
    """
    if not start_raw or not end_raw or not interval:
        raise MissingArgumentsError(
            "split_date_range requires <START_DATE> <END_DATE> <INTERVAL>"
        )

    try:
        start = parse_timestamp(start_raw).floor("s")
    except ValueError as exc:
        raise InvalidStartDateError(f'"{start_raw}" not a valid date') from exc

    try:
        end = parse_timestamp(end_raw).floor("s")
    except ValueError as exc:
        raise InvalidEndDateError(f'"{end_raw}" not a valid date') from exc

    try:
        offset = parse_interval(interval)
        first_step = start + offset
    except (ValueError, OverflowError) as exc:
        raise InvalidIntervalError(f'"{interval}" not a valid expression') from exc

    # A non-advancing interval would never reach the end date
    if first_step <= start:
        raise InvalidIntervalError(f'"{interval}" is not a positive interval')

    if start > end:
        raise StartAfterEndError(
            f'start date "{start_raw}" after end date "{end_raw}"'
        )

    if start == end:
        raise StartEqualsEndError(
            f'start date "{start_raw}" equals end date "{end_raw}"'
        )

    points: list[DateSpec] = []
    current = start

    while current < end:
        points.append(format_datespec(current))
        try:
            following = current + offset
        except (ValueError, OverflowError) as exc:
            raise InvalidIntervalError(
                f'"{interval}" cannot be applied to {points[-1]}'
            ) from exc

        if following <= current:
            raise InvalidIntervalError(
                f'"{interval}" does not advance past {points[-1]}'
            )
        current = following

    points.append(format_datespec(end))

    LOGGER.debug(
        "Date range split",
        extra={"start": points[0], "end": points[-1], "interval": interval, "breakpoints": len(points)},
    )

    return Breakpoints(points=tuple(points))
