"""
Date normalization and interval arithmetic.

Dates travel through the system as ``DateSpec`` strings: UTC, ISO-8601,
second precision (``YYYY-MM-DDTHH:MM:SSZ``). Because the format is fixed
width, lexical ordering of DateSpec values is chronological ordering.

Interval expressions are short civil-calendar durations such as
``"2 months"``, ``"3 hours"`` or ``"1 month 15 days"``. Month and year terms
use calendar arithmetic (adding one month to January 31 lands on the last day
of February); the smaller units are fixed durations.
"""

from __future__ import annotations

import re

import pandas as pd

DateSpec = str

DATESPEC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_TERM = re.compile(r"\s*([+-]?\d+)?\s*([A-Za-z]+)\s*")

_UNITS: dict[str, str] = {
    "s": "seconds",
    "sec": "seconds",
    "secs": "seconds",
    "second": "seconds",
    "seconds": "seconds",
    "min": "minutes",
    "mins": "minutes",
    "minute": "minutes",
    "minutes": "minutes",
    "h": "hours",
    "hr": "hours",
    "hrs": "hours",
    "hour": "hours",
    "hours": "hours",
    "d": "days",
    "day": "days",
    "days": "days",
    "w": "weeks",
    "week": "weeks",
    "weeks": "weeks",
    "fortnight": "fortnights",
    "fortnights": "fortnights",
    "mo": "months",
    "month": "months",
    "months": "months",
    "y": "years",
    "yr": "years",
    "yrs": "years",
    "year": "years",
    "years": "years",
}


def parse_timestamp(raw: object) -> pd.Timestamp:
    """
    Parse a date or date-time into a UTC timestamp.

    Naive inputs (including bare calendar dates) are taken as UTC. Raises
    ValueError when the input is not a recognizable date.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValueError(f"not a valid date: {raw!r}")

    try:
        ts = pd.to_datetime(raw, utc=True)
    except (ValueError, TypeError, OverflowError) as exc:
        raise ValueError(f"not a valid date: {raw!r}") from exc

    if pd.isna(ts):
        raise ValueError(f"not a valid date: {raw!r}")

    return ts


def format_datespec(ts: pd.Timestamp) -> DateSpec:
    return ts.tz_convert("UTC").strftime(DATESPEC_FORMAT)


def normalize_date(raw: object) -> DateSpec:
    """Normalize ``raw`` to a DateSpec. Raises ValueError if unparseable."""
    return format_datespec(parse_timestamp(raw))


def parse_interval(interval: str) -> pd.DateOffset:
    """
    Parse an interval expression into a calendar-aware offset.

    A term without a count means one unit (``"month"`` == ``"1 month"``).
    Raises ValueError for empty or unrecognized expressions.
    """
    if not isinstance(interval, str) or not interval.strip():
        raise ValueError(f"not a valid interval: {interval!r}")

    amounts: dict[str, int] = {}
    pos = 0
    while pos < len(interval):
        match = _TERM.match(interval, pos)
        if match is None or match.end() == pos:
            raise ValueError(f"not a valid interval: {interval!r}")

        count, unit = match.groups()
        key = _UNITS.get(unit.lower())
        if key is None:
            raise ValueError(f"unknown interval unit {unit!r} in {interval!r}")

        amount = int(count) if count is not None else 1
        if key == "fortnights":
            key, amount = "weeks", amount * 2

        amounts[key] = amounts.get(key, 0) + amount
        pos = match.end()

    return pd.DateOffset(**amounts)


def add_interval(date: DateSpec, interval: str) -> DateSpec:
    """Return ``date`` moved forward by ``interval``. Raises ValueError."""
    offset = parse_interval(interval)
    try:
        moved = parse_timestamp(date) + offset
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"{interval!r} cannot be applied to {date}") from exc
    return format_datespec(moved)
