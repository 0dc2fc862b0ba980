from __future__ import annotations

import logging
from typing import Any

from oci.auth.signers import InstancePrincipalsSecurityTokenSigner
from oci.config import from_file, validate_config
from oci.monitoring import MonitoringClient
from oci.monitoring.models import SummarizeMetricsDataDetails

from metrics_export.core.domain.dates import DateSpec, parse_timestamp

LOGGER = logging.getLogger(__name__)

AUTH_MODES = ("instance_principal", "api_key")


def build_monitoring_client(
    *,
    region: str | None = None,
    auth_mode: str = "instance_principal",
    oci_config_file: str | None = None,
    oci_profile: str = "DEFAULT",
) -> MonitoringClient:
    """
    Authenticate a MonitoringClient.

    "instance_principal" uses the identity of the current OCI Compute
    instance and defaults to the instance's region. "api_key" loads a
    profile from an OCI CLI-style config file; ``region`` overrides the
    profile's region.
    """
    if auth_mode == "instance_principal":
        signer = InstancePrincipalsSecurityTokenSigner()
        return MonitoringClient(config={"region": region or signer.region}, signer=signer)

    if auth_mode == "api_key":
        if oci_config_file is None:
            raise ValueError("oci_config_file is required for api_key auth")

        config = from_file(file_location=oci_config_file, profile_name=oci_profile)
        if region:
            config["region"] = region
        validate_config(config)
        return MonitoringClient(config)

    raise ValueError(f"Unknown auth_mode: {auth_mode} (expected one of {AUTH_MODES})")


class OCIMonitoringMetricsClient:
    """
    MetricsQueryClient backed by Oracle Cloud Infrastructure (OCI) Monitoring.

    The goal of this class is *result shape compatibility* with CloudWatch:
    every metric stream returned by ``SummarizeMetricsData`` is reported as a
    dict with ``Id``, ``Label``, ``Timestamps`` and ``Values``, so the rest of
    the export pipeline does not care which cloud produced it.

    Query document: a list of entries, one per MQL query:

        [
          {
            "Id": "m1",
            "Label": "CPU utilization",
            "CompartmentId": "ocid1.compartment.oc1..xxx",
            "Namespace": "oci_computeagent",
            "Query": "CpuUtilization[1h].mean()",
            "Resolution": "1h",                  (optional)
            "ResourceGroup": "...",              (optional)
            "CompartmentIdInSubtree": false      (optional)
          }
        ]
    """

    def __init__(
        self,
        *,
        region: str | None = None,
        auth_mode: str = "instance_principal",
        oci_config_file: str | None = None,
        oci_profile: str = "DEFAULT",
        client: Any | None = None,
    ) -> None:
        # A pre-built client skips authentication entirely
        if client is None:
            client = build_monitoring_client(
                region=region,
                auth_mode=auth_mode,
                oci_config_file=oci_config_file,
                oci_profile=oci_profile,
            )
        self.client = client

    def get_metric_data(
        self,
        *,
        query: Any,
        start: DateSpec,
        end: DateSpec,
    ) -> list[dict[str, Any]]:
        if not isinstance(query, list):
            raise ValueError("OCI query document must be a list of query entries")

        start_time = parse_timestamp(start).to_pydatetime()
        end_time = parse_timestamp(end).to_pydatetime()

        results: list[dict[str, Any]] = []

        for position, entry in enumerate(query):
            entry_id = entry.get("Id") or f"q{position}"

            details = SummarizeMetricsDataDetails(
                namespace=entry["Namespace"],
                query=entry["Query"],
                start_time=start_time,
                end_time=end_time,
                resolution=entry.get("Resolution"),
                resource_group=entry.get("ResourceGroup"),
            )

            response = self.client.summarize_metrics_data(
                compartment_id=entry["CompartmentId"],
                summarize_metrics_data_details=details,
                compartment_id_in_subtree=entry.get("CompartmentIdInSubtree", False),
            )

            streams = response.data or []
            for stream_index, metric_data in enumerate(streams):
                results.append(
                    self._to_result(
                        metric_data,
                        result_id=entry_id if len(streams) == 1 else f"{entry_id}_{stream_index}",
                        label=entry.get("Label"),
                    )
                )

        LOGGER.debug(
            "OCI SummarizeMetricsData completed",
            extra={"start": start, "end": end, "results": len(results)},
        )

        return results

    @staticmethod
    def _to_result(metric_data: Any, *, result_id: str, label: str | None) -> dict[str, Any]:
        """Convert one OCI MetricData stream into a CloudWatch-like result."""
        datapoints = getattr(metric_data, "aggregated_datapoints", None) or []

        dimensions = getattr(metric_data, "dimensions", None) or {}
        if label is None:
            label = getattr(metric_data, "name", None) or result_id
        if dimensions:
            label = f"{label} " + ",".join(f"{k}={v}" for k, v in sorted(dimensions.items()))

        return {
            "Id": result_id,
            "Label": label,
            "Timestamps": [point.timestamp for point in datapoints],
            "Values": [point.value for point in datapoints],
            "StatusCode": "Complete",
        }
