"""MetricsRegistry - In-memory, thread-safe name to metric mapping.

The rest of the process registers and updates metrics here; the CloudWatch
reporter only reads (and optionally clears counters) through ``each``.
"""

import threading
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar

from .instruments import Counter, Gauge, GaugeFloat, Histogram, Meter, Timer

M = TypeVar("M")


class DuplicateMetricError(ValueError):
    """Raised when registering a name that already holds a metric."""

    def __init__(self, name: str):
        super().__init__(f"Metric already registered: {name}")
        self.name = name


class MetricsRegistry:
    """Registry holding all live metrics keyed by name.

    Any object may be registered; the reporter skips kinds it does not know.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._metrics: Dict[str, Any] = {}

    def register(self, name: str, metric: Any) -> None:
        with self._lock:
            if name in self._metrics:
                raise DuplicateMetricError(name)
            self._metrics[name] = metric

    def get(self, name: str) -> Optional[Any]:
        with self._lock:
            return self._metrics.get(name)

    def get_or_register(self, name: str, factory: Callable[[], M]) -> M:
        """Return the metric under ``name``, creating it with ``factory`` if absent."""
        with self._lock:
            if name not in self._metrics:
                self._metrics[name] = factory()
            return self._metrics[name]

    def unregister(self, name: str) -> None:
        with self._lock:
            self._metrics.pop(name, None)

    def unregister_all(self) -> None:
        with self._lock:
            self._metrics.clear()

    def each(self, visit: Callable[[str, Any], None]) -> None:
        """Call ``visit(name, metric)`` for every registered metric.

        Iterates a copy taken under the lock, so visitors may register or
        unregister metrics. Order is unspecified.
        """
        with self._lock:
            entries: List[Tuple[str, Any]] = list(self._metrics.items())
        for name, metric in entries:
            visit(name, metric)

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._metrics

    def _typed(self, name: str, kind: Type[M], factory: Callable[[], M]) -> M:
        metric = self.get_or_register(name, factory)
        if not isinstance(metric, kind):
            raise TypeError(f"Metric {name!r} is a {type(metric).__name__}, not a {kind.__name__}")
        return metric

    def counter(self, name: str) -> Counter:
        return self._typed(name, Counter, Counter)

    def gauge(self, name: str) -> Gauge:
        return self._typed(name, Gauge, Gauge)

    def gauge_float(self, name: str) -> GaugeFloat:
        return self._typed(name, GaugeFloat, GaugeFloat)

    def histogram(self, name: str) -> Histogram:
        return self._typed(name, Histogram, Histogram)

    def meter(self, name: str) -> Meter:
        return self._typed(name, Meter, Meter)

    def timer(self, name: str) -> Timer:
        return self._typed(name, Timer, Timer)
