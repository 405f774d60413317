"""
Tests for walking a registry into one cycle's data points.
"""

from unittest.mock import MagicMock

import numpy as np
import pytest

from metrics_reporter.services.cloudwatch.batcher import batch
from metrics_reporter.services.cloudwatch.collector import collect
from metrics_reporter.services.cloudwatch.filter import FilterRule, NoFilter, PatternFilter
from metrics_reporter.services.metrics.instruments import (
    Histogram,
    HistogramSnapshot,
    MeterSnapshot,
    Timer,
    TimerSnapshot,
)


def as_dict(points):
    return {p.name: p.value for p in points}


def test_empty_registry_yields_nothing(registry):
    assert collect(registry, NoFilter()) == []


def test_zero_counter_yields_nothing(registry):
    registry.counter("idle")
    assert collect(registry, NoFilter()) == []


def test_counter_and_gauge_scenario(registry):
    """Counter req.count=5 with reset plus gauge mem.used=120 give one batch of two."""
    registry.counter("req.count").inc(5)
    registry.gauge("mem.used").update(120)

    points = collect(registry, NoFilter(), reset_counters=True)

    assert as_dict(points) == {"req.count": 5.0, "mem.used": 120.0}
    batches = batch(points, 20)
    assert len(batches) == 1
    assert len(batches[0]) == 2
    assert registry.counter("req.count").count() == 0


def test_timer_scenario(registry):
    """A timer with count 10 and two configured percentiles gives seven points."""
    timer = Timer()
    timer.snapshot = lambda: TimerSnapshot(
        histogram=HistogramSnapshot(count=10, values=np.array([12.0] * 9 + [50.0])),
        meter=MeterSnapshot(count=10, rate1=1.0, rate5=0.8, rate15=0.5, rate_mean=0.9),
    )
    registry.register("latency", timer)

    points = collect(registry, NoFilter([0.5, 0.99]))

    assert [(p.name, p.value) for p in points] == [
        ("latency.count", 10.0),
        ("latency.one-minute", 1.0),
        ("latency.five-minute", 0.8),
        ("latency.fifteen-minute", 0.5),
        ("latency.mean", 0.9),
        ("latency-perc0.500", 12.0),
        ("latency-perc0.990", 50.0),
    ]


def test_empty_histogram_and_timer_yield_nothing(registry):
    registry.histogram("sizes")
    registry.timer("latency")
    assert collect(registry, NoFilter()) == []


def test_filtered_entry_is_not_reset(registry):
    """Test that a counter rejected by the filter keeps its count."""
    registry.counter("debug.events").inc(3)
    registry.counter("api.calls").inc(2)
    policy = PatternFilter([FilterRule("debug.*", report=False)])

    points = collect(registry, policy, reset_counters=True)

    assert as_dict(points) == {"api.calls": 2.0}
    assert registry.counter("debug.events").count() == 3
    assert registry.counter("api.calls").count() == 0


def test_single_timestamp_and_dimensions_per_cycle(registry, timestamp):
    registry.counter("a").inc()
    registry.gauge("b").update(1)
    registry.meter("c").mark()

    points = collect(registry, NoFilter(), dimensions={"host": "web-1"}, timestamp=timestamp)

    assert len(points) == 7
    assert {p.timestamp for p in points} == {timestamp}
    first = points[0].dimensions
    assert all(p.dimensions is first for p in points)
    assert [(d.name, d.value) for d in first] == [("host", "web-1")]


def test_default_timestamp_is_utc(registry):
    registry.gauge("g")
    points = collect(registry, NoFilter())
    assert points[0].timestamp.utcoffset().total_seconds() == 0


def test_unknown_kinds_do_not_abort_cycle(registry):
    registry.register("mystery", object())
    registry.gauge("known").update(4)

    assert as_dict(collect(registry, NoFilter())) == {"known": 4.0}


def test_failing_entry_is_skipped(registry):
    """Test that an exception translating one entry leaves the others intact."""
    broken = MagicMock(spec=Histogram)
    broken.snapshot.side_effect = RuntimeError("snapshot failed")
    registry.register("broken", broken)
    registry.gauge("ok").update(1)

    points = collect(registry, NoFilter())

    assert as_dict(points) == {"ok": 1.0}


def test_percentiles_follow_policy_per_name(registry):
    histogram = registry.histogram("payload")
    for v in (1.0, 2.0, 3.0):
        histogram.update(v)
    policy = PatternFilter([FilterRule("payload", percentiles=(1.0,))])

    points = collect(registry, policy)

    assert [(p.name, p.value) for p in points] == [("payload-perc1.000", 3.0)]


@pytest.mark.parametrize("debug", [True, False])
def test_debug_flag_does_not_change_output(registry, debug):
    registry.histogram("h").update(5.0)
    registry.register("odd", object())
    registry.counter("skip.me").inc()
    policy = PatternFilter([FilterRule("skip.*", report=False)], default_percentiles=[0.5])

    points = collect(registry, policy, debug=debug)

    assert as_dict(points) == {"h-perc0.500": 5.0}
