"""Sinks that receive batches of data points.

A sink's ``submit`` either returns normally or raises; the reporter logs the
failure and drops that batch.
"""

from typing import Any, Protocol, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from metrics_reporter.core.logging_config import get_logger

from .batcher import MAX_BATCH_SIZE
from .models import DataPoint

logger = get_logger(__name__)


class TransportError(RuntimeError):
    """A batch could not be delivered to the metrics backend."""


class MetricsSink(Protocol):
    """Destination for one batch of data points."""

    def submit(self, namespace: str, batch: Sequence[DataPoint]) -> None:
        ...


class CloudWatchSink:
    """Ships each batch with one ``PutMetricData`` call."""

    def __init__(self, client: Any):
        """Initialize with a boto3 CloudWatch client.

        Args:
            client: Result of ``boto3.client("cloudwatch")`` or a stand-in with
                a ``put_metric_data`` method
        """
        self.client = client

    def submit(self, namespace: str, batch: Sequence[DataPoint]) -> None:
        if len(batch) > MAX_BATCH_SIZE:
            raise TransportError(f"Batch of {len(batch)} exceeds the {MAX_BATCH_SIZE} item limit")
        try:
            self.client.put_metric_data(
                Namespace=namespace,
                MetricData=[point.to_cloudwatch() for point in batch],
            )
        except (BotoCoreError, ClientError) as e:
            raise TransportError(f"PutMetricData failed for namespace {namespace}: {e}") from e


class LoggingSink:
    """Writes data points to the log instead of shipping them (dry run)."""

    def submit(self, namespace: str, batch: Sequence[DataPoint]) -> None:
        for point in batch:
            logger.info(f"[{namespace}] {point.name}={point.value} unit={point.unit.value}")
