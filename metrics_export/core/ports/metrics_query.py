"""Metrics query client protocol.

This module defines the boundary between the export engine and a cloud
monitoring service. Concrete implementations adapt a specific provider API
to this protocol.
"""

from __future__ import annotations

from typing import Any, Protocol

from metrics_export.core.domain.dates import DateSpec


class MetricsQueryClient(Protocol):
    """Cloud-facing metric data boundary.

    The export engine must not depend on provider-specific APIs.

    The query document is typed as Any: it is only interpreted by the
    provider adapter, never by the engine.
    """

    def get_metric_data(
        self,
        *,
        query: Any,
        start: DateSpec,
        end: DateSpec,
    ) -> list[dict[str, Any]]:
        """
        Run ``query`` over ``[start, end)`` and return one dict per metric,
        each carrying parallel ``Timestamps`` and ``Values`` lists.

        Raises on any failure of the underlying service call.
        """
