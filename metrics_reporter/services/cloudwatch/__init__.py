"""CloudWatch export: translate registry metrics into data points and ship them.

The reporter task lives in ``reporter``; it is not re-exported here because it
depends on ``metrics_reporter.core.config``, which itself imports ``filter``.
"""

from .batcher import MAX_BATCH_SIZE, batch, iter_batches
from .collector import collect
from .datum import DatumBuilder, build_data_points
from .filter import DEFAULT_PERCENTILES, FilterPolicy, FilterRule, NoFilter, PatternFilter
from .models import DataPoint, Dimension, StandardUnit, build_dimensions
from .transport import CloudWatchSink, LoggingSink, MetricsSink, TransportError

__all__ = [
    "MAX_BATCH_SIZE",
    "batch",
    "iter_batches",
    "collect",
    "DatumBuilder",
    "build_data_points",
    "DEFAULT_PERCENTILES",
    "FilterPolicy",
    "FilterRule",
    "NoFilter",
    "PatternFilter",
    "DataPoint",
    "Dimension",
    "StandardUnit",
    "build_dimensions",
    "CloudWatchSink",
    "LoggingSink",
    "MetricsSink",
    "TransportError",
]
