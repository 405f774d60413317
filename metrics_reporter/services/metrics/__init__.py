"""In-process metrics registry and metric kinds.

Counters, gauges, histograms, meters and timers are recorded here by the host
process and read periodically by the CloudWatch reporter.
"""

from .instruments import (
    Counter,
    Gauge,
    GaugeFloat,
    Histogram,
    HistogramSnapshot,
    Meter,
    MeterSnapshot,
    Timer,
    TimerSnapshot,
)
from .registry import DuplicateMetricError, MetricsRegistry
from .instance import get_registry, set_registry

__all__ = [
    "Counter",
    "Gauge",
    "GaugeFloat",
    "Histogram",
    "HistogramSnapshot",
    "Meter",
    "MeterSnapshot",
    "Timer",
    "TimerSnapshot",
    "DuplicateMetricError",
    "MetricsRegistry",
    "get_registry",
    "set_registry",
]
