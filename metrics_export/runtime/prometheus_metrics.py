from __future__ import annotations

import json
import logging
import os

from prometheus_client import CollectorRegistry, Gauge, push_to_gateway

from metrics_export.export.orchestrator import ExportSummary

LOGGER = logging.getLogger(__name__)

JOB_NAME = "metrics_export"


class PrometheusMetricsClient:
    """Pushgateway client reporting the outcome of one export run.

    Expected environment:
    - PROMETHEUS_PUSHGATEWAY_URL: URL to the Pushgateway.
      Example: http://pushgateway.monitoring.svc.cluster.local:9091

    Optional:
    - PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON: JSON object used as grouping key.
      Example:
        {"instance": "nightly-workspaces-export"}

    Without PROMETHEUS_PUSHGATEWAY_URL every method is a no-op. Delivery is
    best-effort: callers log failures and keep the export's exit status.
    """

    def __init__(self) -> None:
        self._pushgateway_url = os.environ.get("PROMETHEUS_PUSHGATEWAY_URL")
        self._grouping_key = self._load_grouping_key()
        self._registry = CollectorRegistry()
        self._gauges: dict[str, Gauge] = {}

    def is_enabled(self) -> bool:
        return self._pushgateway_url is not None

    @staticmethod
    def _load_grouping_key() -> dict[str, str]:
        raw = os.environ.get("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON")
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning(
                "Invalid PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON; ignoring"
            )
            return {}

        if not isinstance(data, dict):
            return {}

        return {
            key: value
            for key, value in data.items()
            if isinstance(key, str) and isinstance(value, str)
        }

    def set_gauge(self, *, name: str, value: float, documentation: str) -> None:
        if not self._pushgateway_url:
            return

        gauge = self._gauges.get(name)
        if gauge is None:
            gauge = Gauge(name, documentation=documentation, registry=self._registry)
            self._gauges[name] = gauge

        gauge.set(value)

    def record_export(
        self,
        *,
        summary: ExportSummary | None,
        success: bool,
        duration_seconds: float,
    ) -> None:
        self.set_gauge(
            name="metrics_export_success",
            value=1.0 if success else 0.0,
            documentation="1 if the last export completed, 0 otherwise",
        )
        self.set_gauge(
            name="metrics_export_duration_seconds",
            value=duration_seconds,
            documentation="Wall-clock duration of the last export",
        )
        if summary is not None:
            self.set_gauge(
                name="metrics_export_chunks",
                value=summary.chunk_count,
                documentation="Chunk queries issued by the last export",
            )
            self.set_gauge(
                name="metrics_export_rows",
                value=summary.row_count,
                documentation="CSV data rows written by the last export",
            )

    def push_all(self, *, job: str = JOB_NAME) -> None:
        if not self._pushgateway_url:
            return

        push_to_gateway(
            gateway=self._pushgateway_url,
            job=job,
            registry=self._registry,
            grouping_key=self._grouping_key,
        )

        LOGGER.info(
            "Prometheus metrics pushed",
            extra={"job": job, "grouping_key": self._grouping_key},
        )
