"""CloudWatchReporter - Background task shipping registry metrics to CloudWatch.

Every reporting interval the registry is collected into data points, split into
batches of at most 20 and handed to the sink one batch at a time. A failed
batch is logged and dropped; the rest of the cycle still goes out.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from metrics_reporter.core.config import ReporterConfig
from metrics_reporter.core.logging_config import get_logger
from metrics_reporter.services.metrics.registry import MetricsRegistry

from .batcher import MAX_BATCH_SIZE, iter_batches
from .collector import collect
from .transport import MetricsSink

logger = get_logger("cloudwatch_reporter")


@dataclass
class ReportResult:
    """Outcome of one reporting cycle."""
    points: int = 0
    batches_sent: int = 0
    batches_failed: int = 0


def emit_metrics(registry: MetricsRegistry, config: ReporterConfig, sink: MetricsSink) -> ReportResult:
    """Run one collection cycle and submit every batch to ``sink``."""
    data = collect(
        registry,
        config.filter,
        reset_counters=config.reset_counters_on_report,
        dimensions=config.static_dimensions,
        debug=config.debug,
    )
    result = ReportResult(points=len(data))

    for put in iter_batches(data, MAX_BATCH_SIZE):
        try:
            sink.submit(config.namespace, put)
        except Exception as e:
            result.batches_failed += 1
            logger.error(f"Error putting {len(put)} metrics to {config.namespace}: {e}")
            continue
        result.batches_sent += 1
        if config.debug:
            logger.info(f"Put {len(put)} metrics to {config.namespace}")

    return result


class CloudWatchReporter:
    """Cancellable periodic reporting task.

    The first cycle runs one interval after ``start()``. ``stop()`` prevents
    further cycles but lets a cycle already running finish.
    """

    def __init__(self, registry: MetricsRegistry, config: ReporterConfig, sink: MetricsSink):
        self.registry = registry
        self.config = config
        self.sink = sink
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self.cycles = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _report_loop(self, stop_event: asyncio.Event) -> None:
        interval = self.config.reporting_interval.total_seconds()
        logger.info(f"CloudWatch reporter started: namespace={self.config.namespace} interval={interval}s")

        while not stop_event.is_set():
            try:
                # Wait for interval or until stop event is set
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
                break  # Stop event was set
            except asyncio.TimeoutError:
                pass

            try:
                # Blocking network I/O stays off the event loop
                result = await asyncio.to_thread(emit_metrics, self.registry, self.config, self.sink)
                self.cycles += 1
                logger.debug(
                    f"Reported {result.points} points in {result.batches_sent} batches "
                    f"({result.batches_failed} failed)"
                )
            except Exception as e:
                logger.error(f"Error in CloudWatch report loop: {e}")

        logger.info("CloudWatch reporter stopped")

    def start(self) -> None:
        """Start the background reporting task on the running event loop."""
        if self.running:
            logger.warning("CloudWatch reporter already running")
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._report_loop(self._stop_event))
        logger.info("CloudWatch reporter task created")

    def stop(self) -> None:
        """Request shutdown; no new cycle starts after this call."""
        if self._stop_event:
            self._stop_event.set()
        logger.info("CloudWatch reporter stop requested")

    async def wait_closed(self, timeout: Optional[float] = None) -> None:
        """Wait for the task to exit, cancelling it if ``timeout`` expires."""
        task = self._task
        if task is None:
            return
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        except asyncio.TimeoutError:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        finally:
            self._task = None
            self._stop_event = None


# Module-level reporter (same pattern as the system probe)
_reporter: Optional[CloudWatchReporter] = None


def start_cloudwatch_reporter(
    registry: MetricsRegistry, config: ReporterConfig, sink: MetricsSink
) -> CloudWatchReporter:
    """Create and start the process-wide reporter."""
    global _reporter

    if _reporter is not None and _reporter.running:
        logger.warning("CloudWatch reporter already running")
        return _reporter

    _reporter = CloudWatchReporter(registry, config, sink)
    _reporter.start()
    return _reporter


async def stop_cloudwatch_reporter(timeout: Optional[float] = None) -> None:
    """Stop the process-wide reporter and wait for its in-flight cycle."""
    global _reporter

    reporter = _reporter
    _reporter = None
    if reporter is None:
        return
    reporter.stop()
    await reporter.wait_closed(timeout)
