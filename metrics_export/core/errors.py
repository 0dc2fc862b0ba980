"""Error kinds and exception types.

Every failure raised by the export engine carries one ErrorKind. The CLI maps
the kind to the process exit code, so scripts can branch on failure class.
"""

from __future__ import annotations

from enum import IntEnum


class ErrorKind(IntEnum):
    """Closed set of failure classes. The value is the process exit code."""

    MISSING_ARGUMENTS = 1
    INVALID_LOG_LEVEL = 2
    INVALID_START_DATE = 3
    INVALID_END_DATE = 4
    START_AFTER_END = 5
    START_EQUALS_END = 6
    INVALID_INTERVAL = 7
    QUERY_DOCUMENT_NOT_FOUND = 8
    RESULTS_FILE_FAILED = 9
    CHUNK_QUERY_FAILED = 10
    TRANSFORM_FAILED = 11
    INVALID_CONFIG = 12


class MetricsExportError(Exception):
    """Base class for all export failures."""

    kind: ErrorKind

    @property
    def exit_code(self) -> int:
        return int(self.kind)


class MissingArgumentsError(MetricsExportError):
    kind = ErrorKind.MISSING_ARGUMENTS


class InvalidLogLevelError(MetricsExportError):
    kind = ErrorKind.INVALID_LOG_LEVEL


class InvalidStartDateError(MetricsExportError):
    kind = ErrorKind.INVALID_START_DATE


class InvalidEndDateError(MetricsExportError):
    kind = ErrorKind.INVALID_END_DATE


class StartAfterEndError(MetricsExportError):
    kind = ErrorKind.START_AFTER_END


class StartEqualsEndError(MetricsExportError):
    kind = ErrorKind.START_EQUALS_END


class InvalidIntervalError(MetricsExportError):
    kind = ErrorKind.INVALID_INTERVAL


class QueryDocumentNotFoundError(MetricsExportError):
    kind = ErrorKind.QUERY_DOCUMENT_NOT_FOUND


class ResultsFileError(MetricsExportError):
    kind = ErrorKind.RESULTS_FILE_FAILED


class ChunkQueryFailedError(MetricsExportError):
    kind = ErrorKind.CHUNK_QUERY_FAILED


class TransformFailedError(MetricsExportError):
    kind = ErrorKind.TRANSFORM_FAILED


class InvalidConfigError(MetricsExportError):
    kind = ErrorKind.INVALID_CONFIG
