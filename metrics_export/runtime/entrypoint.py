from __future__ import annotations

import argparse
import logging
import sys
import time
from contextlib import ExitStack
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from metrics_export.core.errors import (
    InvalidLogLevelError,
    MetricsExportError,
    MissingArgumentsError,
    ResultsFileError,
)
from metrics_export.core.events.event_bus import EventBus
from metrics_export.core.events.sinks.file_recorder import FileRecorderSink
from metrics_export.core.events.sinks.sink_logging import LoggingEventSink
from metrics_export.export.orchestrator import (
    ExportSummary,
    MetricQueryOrchestrator,
    load_query_document,
)
from metrics_export.runtime.config import ExportConfig
from metrics_export.runtime.prometheus_metrics import PrometheusMetricsClient

if TYPE_CHECKING:
    from metrics_export.core.ports.metrics_query import MetricsQueryClient

LOGGER = logging.getLogger(__name__)

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")

# Successful WorkSpaces connections, summed hourly across running modes
DEFAULT_QUERY_DOCUMENT: list[dict[str, str]] = [
    {
        "Id": "m1",
        "Expression": (
            "SUM(SEARCH('{AWS/WorkSpaces,RunningMode} MetricName=ConnectionSuccess', "
            "'Sum', 3600))"
        ),
        "Label": "Successful connections",
    }
]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metrics-export",
        description=(
            "Query cloud metrics over a date range in interval-sized chunks "
            "and write the results as CSV."
        ),
    )

    parser.add_argument(
        "-q", "--query-file",
        type=Path,
        help="Path to JSON query document (default: WorkSpaces successful connections).",
    )
    parser.add_argument(
        "-r", "--results-file",
        type=Path,
        help="Path to CSV results file (default: stdout).",
    )
    parser.add_argument(
        "-s", "--start-date",
        help="Start date, e.g. 2025-01-01 or 2025-01-01T00:00:00Z (required).",
    )
    parser.add_argument(
        "-e", "--end-date",
        help="End date, same formats as --start-date (required).",
    )
    parser.add_argument(
        "-i", "--interval",
        help='Chunk interval, e.g. "2 months", "3 hours", "10 minutes" (default: "1 month").',
    )
    parser.add_argument(
        "-l", "--label",
        help='Value column header (default: "Successful connections").',
    )
    parser.add_argument(
        "--backend",
        choices=("cloudwatch", "oci"),
        help="Metrics backend (default: cloudwatch).",
    )
    parser.add_argument(
        "--region",
        help="Cloud region override.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to export JSON config.",
    )
    parser.add_argument(
        "--events-file",
        type=Path,
        help="Append export progress events as JSON lines to this file.",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        help=f"One of: {', '.join(LOG_LEVELS)} (default: info).",
    )

    return parser


def _configure_logging(level_name: str) -> None:
    level = level_name.lower()
    if level not in LOG_LEVELS:
        raise InvalidLogLevelError(f'Invalid log level "{level_name}"')

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_client(cfg: ExportConfig) -> MetricsQueryClient:
    """Instantiate the query client for the configured backend."""
    if cfg.backend == "oci":
        from metrics_export.io.oci_monitoring_adapter import OCIMonitoringMetricsClient

        return OCIMonitoringMetricsClient(
            region=cfg.region,
            auth_mode=cfg.oci_auth_mode,
            oci_config_file=cfg.oci_config_file,
            oci_profile=cfg.oci_profile,
        )

    from metrics_export.io.cloudwatch_adapter import CloudWatchMetricsClient

    return CloudWatchMetricsClient(region=cfg.region, profile=cfg.profile)


class _DeferredClient:
    """
    Builds the backend client on the first chunk query.

    Input validation therefore runs before any cloud credentials or regions
    are resolved, and a client that cannot be built fails that first query.
    """

    def __init__(self, cfg: ExportConfig) -> None:
        self._cfg = cfg
        self._client: MetricsQueryClient | None = None

    def get_metric_data(self, *, query: Any, start: str, end: str) -> list[dict[str, Any]]:
        if self._client is None:
            self._client = build_client(self._cfg)
        return self._client.get_metric_data(query=query, start=start, end=end)


def _open_results(stack: ExitStack, path: Path | None) -> TextIO:
    if path is None:
        return sys.stdout

    try:
        return stack.enter_context(path.open("w", encoding="utf-8", newline=""))
    except OSError as exc:
        raise ResultsFileError(f'Cannot create results file "{path}": {exc}') from exc


def _push_metrics(
    *,
    summary: ExportSummary | None,
    success: bool,
    duration_seconds: float,
) -> None:
    metrics = PrometheusMetricsClient()
    if not metrics.is_enabled():
        return

    try:
        metrics.record_export(
            summary=summary,
            success=success,
            duration_seconds=duration_seconds,
        )
        metrics.push_all()
    except Exception:
        LOGGER.exception("Prometheus push failed")


def run(
    args: argparse.Namespace,
    *,
    client: MetricsQueryClient | None = None,
) -> ExportSummary:
    """
    Execute one export from parsed CLI arguments.

    ``client`` replaces the backend built from the configuration (tests).
    """
    if not args.start_date or not args.end_date:
        raise MissingArgumentsError("Arguments are missing: --start-date and --end-date")

    if args.interval == "":
        raise MissingArgumentsError('Option "-i|--interval" must be followed by a value')

    cfg = ExportConfig.from_file(args.config) if args.config else ExportConfig()
    cfg = cfg.with_overrides(
        backend=args.backend,
        region=args.region,
        interval=args.interval,
        label=args.label,
    )

    query: Any
    if args.query_file is not None:
        query = load_query_document(args.query_file)
    else:
        query = DEFAULT_QUERY_DOCUMENT

    with ExitStack() as stack:
        sink = _open_results(stack, args.results_file)

        event_bus = stack.enter_context(EventBus(sinks=[LoggingEventSink(LOGGER)]))
        if args.events_file is not None:
            event_bus.register(FileRecorderSink(args.events_file))

        orchestrator = MetricQueryOrchestrator(
            client=client if client is not None else _DeferredClient(cfg),
            sink=sink,
            label=cfg.label,
            event_bus=event_bus,
            scratch_dir=cfg.scratch_dir,
        )

        return orchestrator.get_metric_data(
            query,
            args.start_date,
            args.end_date,
            cfg.interval,
        )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        _configure_logging(args.log_level)
    except InvalidLogLevelError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return exc.exit_code

    started = time.monotonic()
    summary: ExportSummary | None = None

    try:
        summary = run(args)
    except MetricsExportError as exc:
        LOGGER.error(str(exc), extra={"error_kind": exc.kind.name})
        return exc.exit_code
    finally:
        _push_metrics(
            summary=summary,
            success=summary is not None,
            duration_seconds=time.monotonic() - started,
        )

    LOGGER.info(
        "Export completed",
        extra={"chunks": summary.chunk_count, "rows": summary.row_count},
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
