"""Split data points into request-sized batches."""

from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")

# PutMetricData accepts at most this many MetricData entries per request
MAX_BATCH_SIZE = 20


def iter_batches(points: Sequence[T], max_size: int = MAX_BATCH_SIZE) -> Iterator[List[T]]:
    """Yield consecutive slices of at most ``max_size`` items, in order.

    Empty input yields nothing.
    """
    if max_size < 1:
        raise ValueError(f"max_size must be positive, got {max_size}")
    for start in range(0, len(points), max_size):
        yield list(points[start:start + max_size])


def batch(points: Sequence[T], max_size: int = MAX_BATCH_SIZE) -> List[List[T]]:
    return list(iter_batches(points, max_size))
