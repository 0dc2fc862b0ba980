"""Public API for the metrics_export package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Domain types
# ----------------------------------------------------------------------
from metrics_export.core.domain.dates import (
    DateSpec,
    add_interval,
    normalize_date,
)
from metrics_export.core.domain.types import (
    Breakpoints,
    ChunkWindow,
    CsvRow,
    MetricResult,
)

# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------
from metrics_export.core.errors import (
    ChunkQueryFailedError,
    ErrorKind,
    InvalidEndDateError,
    InvalidIntervalError,
    InvalidStartDateError,
    MetricsExportError,
    MissingArgumentsError,
    QueryDocumentNotFoundError,
    StartAfterEndError,
    StartEqualsEndError,
    TransformFailedError,
)
from metrics_export.core.ports.metrics_query import MetricsQueryClient

# ----------------------------------------------------------------------
# Export engine
# ----------------------------------------------------------------------
from metrics_export.export.orchestrator import (
    ExportSummary,
    MetricQueryOrchestrator,
    get_metric_data,
    load_query_document,
)
from metrics_export.export.splitter import split_date_range
from metrics_export.export.transformer import to_csv_rows

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Engine
    "MetricQueryOrchestrator",
    "ExportSummary",
    "get_metric_data",
    "load_query_document",
    "split_date_range",
    "to_csv_rows",

    # Boundary
    "MetricsQueryClient",

    # Domain
    "DateSpec",
    "normalize_date",
    "add_interval",
    "Breakpoints",
    "ChunkWindow",
    "CsvRow",
    "MetricResult",

    # Errors
    "ErrorKind",
    "MetricsExportError",
    "MissingArgumentsError",
    "InvalidStartDateError",
    "InvalidEndDateError",
    "InvalidIntervalError",
    "StartAfterEndError",
    "StartEqualsEndError",
    "QueryDocumentNotFoundError",
    "ChunkQueryFailedError",
    "TransformFailedError",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("metrics-export")
except PackageNotFoundError:
    __version__ = "0.0.0"
