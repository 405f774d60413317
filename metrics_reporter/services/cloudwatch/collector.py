"""Walk the registry once and translate every reportable entry."""

from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from metrics_reporter.core.logging_config import get_logger
from metrics_reporter.services.metrics.registry import MetricsRegistry

from .datum import DatumBuilder
from .filter import FilterPolicy
from .models import DataPoint, build_dimensions

logger = get_logger(__name__)


def collect(
    registry: MetricsRegistry,
    policy: FilterPolicy,
    reset_counters: bool = False,
    dimensions: Optional[Mapping[str, str]] = None,
    timestamp: Optional[datetime] = None,
    debug: bool = False,
) -> List[DataPoint]:
    """Produce the data points for one collection cycle.

    Every point shares a single UTC timestamp and one dimensions tuple.
    Entries rejected by ``policy`` are left untouched (no counter reset).
    An entry whose translation raises is logged and skipped.
    """
    builder = DatumBuilder(
        timestamp=timestamp or datetime.now(timezone.utc),
        dimensions=build_dimensions(dimensions or {}),
        policy=policy,
        reset_counters=reset_counters,
        debug=debug,
    )
    data: List[DataPoint] = []

    def visit(name: str, metric: Any) -> None:
        if not policy.should_report(name):
            if debug:
                logger.info(f"Filtered out {name}")
            return
        try:
            data.extend(builder.build(name, metric))
        except Exception as e:
            logger.error(f"Error translating metric {name}: {e}")

    registry.each(visit)
    return data
