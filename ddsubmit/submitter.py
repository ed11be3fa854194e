"""Dry-run serialization and live submission to the Datadog metrics API."""
import json
import logging
import sys
from typing import Optional, TextIO

from datadog_api_client import ApiClient, Configuration
from datadog_api_client.exceptions import OpenApiException
from datadog_api_client.v2.api.metrics_api import MetricsApi
from datadog_api_client.v2.model.metric_intake_type import MetricIntakeType
from datadog_api_client.v2.model.metric_payload import MetricPayload
from datadog_api_client.v2.model.metric_point import MetricPoint
from datadog_api_client.v2.model.metric_series import MetricSeries
from urllib3.exceptions import HTTPError

from ddsubmit.errors import SubmissionError
from ddsubmit.models import Credentials, Metric, MetricType

INTAKE_TYPES = {
    MetricType.COUNTER: MetricIntakeType.COUNT,
    MetricType.GAUGE: MetricIntakeType.GAUGE,
}


def build_configuration(credentials: Credentials) -> Configuration:
    """Create an API client configuration from the two keys."""
    configuration = Configuration()
    configuration.api_key["apiKeyAuth"] = credentials.api_key
    configuration.api_key["appKeyAuth"] = credentials.app_key
    return configuration


def build_payload(metric: Metric) -> MetricPayload:
    """Translate a metric into a single-series intake payload."""
    series = MetricSeries(
        metric=metric.name,
        type=INTAKE_TYPES[metric.type],
        points=[
            MetricPoint(timestamp=int(p.timestamp), value=p.value)
            for p in metric.points
        ],
        tags=list(metric.tags),
    )
    return MetricPayload(series=[series])


class Submitter:
    """Sends a metric to Datadog, or prints it when dry-running."""

    def __init__(self, logger: Optional[logging.Logger] = None, stream: Optional[TextIO] = None):
        """
        Args:
            logger: Logger for progress messages
            stream: Diagnostic stream for dry-run output, stderr by default
        """
        self.logger = logger or logging.getLogger(__name__)
        self.stream = stream if stream is not None else sys.stderr

    def serialize(self, metric: Metric) -> str:
        try:
            return json.dumps(metric.to_payload(), sort_keys=True, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise SubmissionError(f"could not serialize metric '{metric.name}': {e}") from e

    def submit(self, metric: Metric, credentials: Credentials, dry_run: bool = False) -> None:
        """Submit ``metric``; network I/O only happens when not a dry run."""
        if dry_run:
            self.stream.write(self.serialize(metric) + "\n")
            self.stream.flush()
            self.logger.debug(f"Dry run: '{metric.name}' not sent")
            return

        payload = build_payload(metric)
        try:
            with ApiClient(build_configuration(credentials)) as api_client:
                MetricsApi(api_client).submit_metrics(body=payload)
        except (OpenApiException, HTTPError) as e:
            raise SubmissionError(f"failed to submit metric '{metric.name}': {e}") from e

        self.logger.info(
            f"Submitted {metric.type.value} '{metric.name}' "
            f"({len(metric.points)} points)"
        )
