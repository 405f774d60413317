"""Translate one registry entry into CloudWatch data points.

Rules per metric kind:
    Counter          -> ``name`` (Count), only when the count is positive
    Gauge/GaugeFloat -> ``name`` (Count), always
    Histogram        -> ``name-perc{p:.3f}`` per configured percentile,
                        nothing when the histogram is empty
    Meter            -> ``name.count``, ``.one-minute``, ``.five-minute``,
                        ``.fifteen-minute``, ``.mean``
    Timer            -> the five Meter points plus the Histogram percentiles,
                        nothing when the timer is empty
Anything else yields no points.
"""

from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple

from metrics_reporter.core.logging_config import get_logger
from metrics_reporter.services.metrics.instruments import (
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

from .filter import FilterPolicy
from .models import DataPoint, Dimensions, StandardUnit

logger = get_logger(__name__)

RATE_SUFFIXES: Tuple[str, ...] = ("count", "one-minute", "five-minute", "fifteen-minute", "mean")


def percentile_name(name: str, p: float) -> str:
    return f"{name}-perc{p:.3f}"


def _rate_values(snapshot: Any) -> Tuple[float, ...]:
    # Same order as RATE_SUFFIXES
    return (
        float(snapshot.count),
        snapshot.rate1,
        snapshot.rate5,
        snapshot.rate15,
        snapshot.rate_mean,
    )


class DatumBuilder:
    """Builds data points sharing one timestamp and one dimensions tuple.

    One builder is created per collection cycle.
    """

    def __init__(
        self,
        timestamp: datetime,
        dimensions: Dimensions,
        policy: FilterPolicy,
        reset_counters: bool = False,
        debug: bool = False,
    ):
        self.timestamp = timestamp
        self.dimensions = dimensions
        self.policy = policy
        self.reset_counters = reset_counters
        self.debug = debug

    def datum(self, name: str, value: float, unit: StandardUnit = StandardUnit.NONE) -> DataPoint:
        return DataPoint(
            name=name,
            value=float(value),
            timestamp=self.timestamp,
            dimensions=self.dimensions,
            unit=unit,
        )

    def build(self, name: str, metric: Any) -> List[DataPoint]:
        """Return the data points for ``metric``; unknown kinds give ``[]``."""
        handler = self._handler_for(metric)
        if handler is None:
            if self.debug:
                logger.info(f"Skipping {name}: unsupported metric kind {type(metric).__name__}")
            return []
        return handler(name, metric)

    def _handler_for(self, metric: Any) -> Optional[Callable[[str, Any], List[DataPoint]]]:
        if isinstance(metric, Counter):
            return self._counter
        if isinstance(metric, (Gauge, GaugeFloat)):
            return self._gauge
        if isinstance(metric, Histogram):
            return self._histogram
        if isinstance(metric, Meter):
            return self._meter
        if isinstance(metric, Timer):
            return self._timer
        return None

    def _counter(self, name: str, metric: Counter) -> List[DataPoint]:
        # Read and reset are one step so concurrent inc() calls land in the next cycle
        count = metric.snapshot_and_clear() if self.reset_counters else metric.count()
        return [self.datum(name, count, StandardUnit.COUNT)] if count > 0 else []

    def _gauge(self, name: str, metric: Any) -> List[DataPoint]:
        return [self.datum(name, metric.value(), StandardUnit.COUNT)]

    def _percentile_points(self, name: str, snapshot: Any) -> List[DataPoint]:
        return [
            self.datum(percentile_name(name, p), snapshot.percentile(p))
            for p in self.policy.percentiles(name)
        ]

    def _rate_points(self, name: str, snapshot: Any) -> List[DataPoint]:
        return [
            self.datum(f"{name}.{suffix}", value)
            for suffix, value in zip(RATE_SUFFIXES, _rate_values(snapshot))
        ]

    def _histogram(self, name: str, metric: Histogram) -> List[DataPoint]:
        snapshot: HistogramSnapshot = metric.snapshot()
        if snapshot.count == 0:
            return []
        if self.debug:
            logger.info(
                f"Histogram {name}: count={snapshot.count} min={snapshot.min} "
                f"max={snapshot.max} mean={snapshot.mean:.3f}"
            )
        return self._percentile_points(name, snapshot)

    def _meter(self, name: str, metric: Meter) -> List[DataPoint]:
        snapshot: MeterSnapshot = metric.snapshot()
        return self._rate_points(name, snapshot)

    def _timer(self, name: str, metric: Timer) -> List[DataPoint]:
        snapshot: TimerSnapshot = metric.snapshot()
        if snapshot.count == 0:
            return []
        return self._rate_points(name, snapshot) + self._percentile_points(name, snapshot)


def build_data_points(
    name: str,
    metric: Any,
    timestamp: datetime,
    dimensions: Dimensions,
    policy: FilterPolicy,
    reset_counters: bool = False,
) -> List[DataPoint]:
    """One-off translation of a single entry, outside a collection cycle."""
    return DatumBuilder(timestamp, dimensions, policy, reset_counters=reset_counters).build(name, metric)
