"""Metric kinds held by the MetricsRegistry.

Counters and gauges are single values read atomically. Histograms, meters and
timers expose ``snapshot()``, which returns an immutable copy that later
updates on the live metric do not affect.
"""

import math
import random
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence

import numpy as np

DEFAULT_RESERVOIR_SIZE = 1028
TICK_INTERVAL_SECONDS = 5.0


class Counter:
    """Integer count, monotonic until cleared."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._count = 0

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= n

    def count(self) -> int:
        with self._lock:
            return self._count

    def clear(self) -> None:
        with self._lock:
            self._count = 0

    def snapshot_and_clear(self) -> int:
        """Return the current count and zero it under a single lock hold."""
        with self._lock:
            count, self._count = self._count, 0
            return count


class Gauge:
    """Instantaneous integer reading.

    When ``value_fn`` is given the gauge is functional: every read calls it.
    """

    def __init__(self, value_fn: Optional[Callable[[], int]] = None) -> None:
        self._lock = threading.Lock()
        self._value = 0
        self._value_fn = value_fn

    def update(self, value: int) -> None:
        if self._value_fn is not None:
            raise TypeError("Functional gauges cannot be updated")
        with self._lock:
            self._value = int(value)

    def value(self) -> int:
        if self._value_fn is not None:
            return int(self._value_fn())
        with self._lock:
            return self._value


class GaugeFloat:
    """Instantaneous float reading. Same contract as Gauge."""

    def __init__(self, value_fn: Optional[Callable[[], float]] = None) -> None:
        self._lock = threading.Lock()
        self._value = 0.0
        self._value_fn = value_fn

    def update(self, value: float) -> None:
        if self._value_fn is not None:
            raise TypeError("Functional gauges cannot be updated")
        with self._lock:
            self._value = float(value)

    def value(self) -> float:
        if self._value_fn is not None:
            return float(self._value_fn())
        with self._lock:
            return self._value


@dataclass(frozen=True, eq=False)
class HistogramSnapshot:
    """Frozen view of a histogram's sample.

    ``count`` is the number of updates ever recorded, which may exceed the
    number of retained ``values``.
    """
    count: int
    values: np.ndarray

    @property
    def size(self) -> int:
        return int(self.values.size)

    @property
    def min(self) -> float:
        return float(self.values.min()) if self.values.size else 0.0

    @property
    def max(self) -> float:
        return float(self.values.max()) if self.values.size else 0.0

    @property
    def sum(self) -> float:
        return float(self.values.sum()) if self.values.size else 0.0

    @property
    def mean(self) -> float:
        return float(self.values.mean()) if self.values.size else 0.0

    def percentile(self, p: float) -> float:
        """Value at quantile ``p`` in [0, 1].

        Uses the p*(n+1) rank with linear interpolation, clamped to the
        sample min and max. An empty sample yields 0.0.
        """
        if not self.values.size:
            return 0.0
        return float(np.quantile(self.values, p, method="weibull"))

    def percentiles(self, ps: Sequence[float]) -> List[float]:
        return [self.percentile(p) for p in ps]


class Histogram:
    """Distribution of values kept in a uniform reservoir sample."""

    def __init__(self, reservoir_size: int = DEFAULT_RESERVOIR_SIZE, rng: Optional[random.Random] = None) -> None:
        if reservoir_size < 1:
            raise ValueError("reservoir_size must be positive")
        self._lock = threading.Lock()
        self._reservoir_size = reservoir_size
        self._rng = rng or random.Random()
        self._values: List[float] = []
        self._count = 0

    def update(self, value: float) -> None:
        with self._lock:
            self._count += 1
            if len(self._values) < self._reservoir_size:
                self._values.append(float(value))
            else:
                # Reservoir sampling keeps every update equally likely to be retained
                slot = self._rng.randrange(self._count)
                if slot < self._reservoir_size:
                    self._values[slot] = float(value)

    def count(self) -> int:
        with self._lock:
            return self._count

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self._count = 0

    def snapshot(self) -> HistogramSnapshot:
        with self._lock:
            return HistogramSnapshot(count=self._count, values=np.array(self._values, dtype=float))


class EWMA:
    """Exponentially-weighted moving average of a per-second rate."""

    def __init__(self, alpha: float) -> None:
        self.alpha = alpha
        self._rate = 0.0
        self._uncounted = 0
        self._initialized = False

    @classmethod
    def for_minutes(cls, minutes: float) -> "EWMA":
        return cls(1.0 - math.exp(-TICK_INTERVAL_SECONDS / 60.0 / minutes))

    def update(self, n: int) -> None:
        self._uncounted += n

    def tick(self) -> None:
        instant = self._uncounted / TICK_INTERVAL_SECONDS
        self._uncounted = 0
        if self._initialized:
            self._rate += self.alpha * (instant - self._rate)
        else:
            self._rate = instant
            self._initialized = True

    def rate(self) -> float:
        return self._rate


@dataclass(frozen=True)
class MeterSnapshot:
    count: int
    rate1: float
    rate5: float
    rate15: float
    rate_mean: float


class Meter:
    """Event count plus 1, 5 and 15 minute moving-average rates.

    Averages are ticked every 5 seconds, lazily, whenever the meter is marked
    or snapshotted.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = threading.Lock()
        self._clock = clock
        self._count = 0
        self._start = clock()
        self._last_tick = self._start
        self._m1 = EWMA.for_minutes(1)
        self._m5 = EWMA.for_minutes(5)
        self._m15 = EWMA.for_minutes(15)

    def _tick_if_necessary(self, now: float) -> None:
        age = now - self._last_tick
        if age < TICK_INTERVAL_SECONDS:
            return
        ticks = int(age // TICK_INTERVAL_SECONDS)
        self._last_tick += ticks * TICK_INTERVAL_SECONDS
        for _ in range(ticks):
            self._m1.tick()
            self._m5.tick()
            self._m15.tick()

    def mark(self, n: int = 1) -> None:
        with self._lock:
            self._tick_if_necessary(self._clock())
            self._count += n
            self._m1.update(n)
            self._m5.update(n)
            self._m15.update(n)

    def count(self) -> int:
        with self._lock:
            return self._count

    def snapshot(self) -> MeterSnapshot:
        with self._lock:
            now = self._clock()
            self._tick_if_necessary(now)
            elapsed = now - self._start
            return MeterSnapshot(
                count=self._count,
                rate1=self._m1.rate(),
                rate5=self._m5.rate(),
                rate15=self._m15.rate(),
                rate_mean=self._count / elapsed if elapsed > 0 else 0.0,
            )


@dataclass(frozen=True)
class TimerSnapshot:
    """Histogram of durations plus meter of invocations, frozen together."""
    histogram: HistogramSnapshot
    meter: MeterSnapshot

    @property
    def count(self) -> int:
        return self.histogram.count

    @property
    def rate1(self) -> float:
        return self.meter.rate1

    @property
    def rate5(self) -> float:
        return self.meter.rate5

    @property
    def rate15(self) -> float:
        return self.meter.rate15

    @property
    def rate_mean(self) -> float:
        return self.meter.rate_mean

    def percentile(self, p: float) -> float:
        return self.histogram.percentile(p)


class Timer:
    """Durations in milliseconds and the rate at which they are recorded."""

    def __init__(
        self,
        histogram: Optional[Histogram] = None,
        meter: Optional[Meter] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._histogram = histogram or Histogram()
        self._meter = meter or Meter()

    def update(self, duration_ms: float) -> None:
        with self._lock:
            self._histogram.update(duration_ms)
            self._meter.mark()

    def update_since(self, t0_ns: int) -> None:
        """Record the time elapsed since ``t0_ns`` (from ``time.monotonic_ns()``)."""
        self.update((time.monotonic_ns() - t0_ns) / 1_000_000.0)

    @contextmanager
    def time(self) -> Iterator[None]:
        """Time the enclosed block.

        Usage example:
        ```python
        with registry.timer("db.query").time():
            rows = session.execute(query)
        ```
        """
        t0 = time.monotonic_ns()
        try:
            yield
        finally:
            self.update_since(t0)

    def count(self) -> int:
        return self._histogram.count()

    def snapshot(self) -> TimerSnapshot:
        with self._lock:
            return TimerSnapshot(histogram=self._histogram.snapshot(), meter=self._meter.snapshot())
