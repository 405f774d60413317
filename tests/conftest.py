import os
import tempfile
from datetime import datetime, timezone

# Keep test runs from writing a logs/ directory into the working directory
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="metrics_reporter_logs_"))

import pytest

from metrics_reporter.services.metrics.registry import MetricsRegistry


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def registry():
    return MetricsRegistry()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timestamp():
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
