from __future__ import annotations

import logging
from typing import Any

import boto3

from metrics_export.core.domain.dates import DateSpec, parse_timestamp

LOGGER = logging.getLogger(__name__)


class CloudWatchMetricsClient:
    """
    MetricsQueryClient backed by Amazon CloudWatch ``GetMetricData``.

    The query document is a list of ``MetricDataQuery`` dicts, exactly as
    accepted by ``aws cloudwatch get-metric-data --metric-data-queries``. A
    mapping with a ``MetricDataQueries`` key (the ``--cli-input-json`` shape)
    is accepted too.

    GetMetricData pages its results with ``NextToken``; pages are merged per
    query ``Id`` so callers see one result per query, just like the AWS CLI
    output.

    Authentication follows the standard boto3 credential chain (environment,
    shared config/credentials files, instance or task roles).
    """

    def __init__(
        self,
        *,
        region: str | None = None,
        profile: str | None = None,
        client: Any | None = None,
    ) -> None:
        """
        Create a CloudWatch client wrapper.

        Parameters:
          region:
            AWS region name (e.g. "eu-west-1"). Falls back to the boto3
            default resolution when omitted.

          profile:
            Named profile from the shared AWS config files.

          client:
            Pre-built boto3 CloudWatch client. Takes precedence over
            region/profile; mainly useful for tests.
        """
        if client is None:
            session = boto3.session.Session(
                profile_name=profile,
                region_name=region,
            )
            client = session.client("cloudwatch")

        self._client = client

    def get_metric_data(
        self,
        *,
        query: Any,
        start: DateSpec,
        end: DateSpec,
    ) -> list[dict[str, Any]]:
        queries = query
        if isinstance(query, dict) and "MetricDataQueries" in query:
            queries = query["MetricDataQueries"]

        paginator = self._client.get_paginator("get_metric_data")
        pages = paginator.paginate(
            MetricDataQueries=queries,
            StartTime=parse_timestamp(start).to_pydatetime(),
            EndTime=parse_timestamp(end).to_pydatetime(),
        )

        merged: dict[str, dict[str, Any]] = {}
        page_count = 0

        for page in pages:
            page_count += 1
            for result in page.get("MetricDataResults", []):
                self._merge_result(merged, result)

        LOGGER.debug(
            "CloudWatch GetMetricData completed",
            extra={"start": start, "end": end, "pages": page_count, "results": len(merged)},
        )

        return list(merged.values())

    @staticmethod
    def _merge_result(merged: dict[str, dict[str, Any]], result: dict[str, Any]) -> None:
        key = result.get("Id") or result.get("Label") or str(len(merged))

        entry = merged.get(key)
        if entry is None:
            entry = {
                "Id": result.get("Id"),
                "Label": result.get("Label"),
                "Timestamps": [],
                "Values": [],
                "StatusCode": result.get("StatusCode"),
            }
            merged[key] = entry

        entry["Timestamps"].extend(result.get("Timestamps", []))
        entry["Values"].extend(result.get("Values", []))

        # The last page reports the final status (Complete vs PartialData)
        if result.get("StatusCode"):
            entry["StatusCode"] = result["StatusCode"]
