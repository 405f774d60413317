"""System metrics probe for process and host level gauges.

This module samples CPU, memory and thread counts with psutil into registry
gauges at a fixed rate, so they are reported alongside application metrics.
"""

import asyncio
import threading
from typing import Optional

import psutil

from metrics_reporter.core.logging_config import get_logger
from .registry import MetricsRegistry

logger = get_logger(__name__)

CPU_PERCENT = "runtime.cpu_percent"
MEMORY_USED_MB = "runtime.memory_used_mb"
MEMORY_PERCENT = "runtime.memory_percent"
RSS_MB = "runtime.rss_mb"
THREAD_COUNT = "runtime.thread_count"

# Module-level task reference
_probe_task: Optional[asyncio.Task] = None
_stop_event: Optional[asyncio.Event] = None


def capture_system_metrics(registry: MetricsRegistry, process: Optional[psutil.Process] = None) -> None:
    """Take one sample and store it in the registry gauges."""
    process = process or psutil.Process()
    memory = psutil.virtual_memory()

    registry.gauge_float(CPU_PERCENT).update(psutil.cpu_percent(interval=None))
    registry.gauge_float(MEMORY_USED_MB).update(memory.used / (1024 * 1024))  # Convert to MB
    registry.gauge_float(MEMORY_PERCENT).update(memory.percent)
    registry.gauge_float(RSS_MB).update(process.memory_info().rss / (1024 * 1024))
    registry.gauge(THREAD_COUNT).update(threading.active_count())


async def _system_probe_loop(registry: MetricsRegistry, stop_event: asyncio.Event, interval: float) -> None:
    """Background coroutine that samples system metrics every ``interval`` seconds.

    Args:
        registry: MetricsRegistry instance to update
        stop_event: Event to signal shutdown
        interval: Seconds between samples
    """
    logger.info(f"System probe started, sampling every {interval}s")
    process = psutil.Process()

    while not stop_event.is_set():
        try:
            capture_system_metrics(registry, process)
            logger.debug(f"System metrics: CPU={registry.gauge_float(CPU_PERCENT).value():.1f}%")
        except Exception as e:
            logger.error(f"Error collecting system metrics: {e}")

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval)
            break  # Stop event was set
        except asyncio.TimeoutError:
            continue  # Timeout means keep going

    logger.info("System probe stopped")


def start_system_probe(registry: MetricsRegistry, interval: float = 10.0) -> None:
    """Start the system probe background task.

    Args:
        registry: MetricsRegistry instance to populate with system metrics
        interval: Seconds between samples
    """
    global _probe_task, _stop_event

    if _probe_task and not _probe_task.done():
        logger.warning("System probe already running")
        return

    _stop_event = asyncio.Event()
    _probe_task = asyncio.create_task(_system_probe_loop(registry, _stop_event, interval))
    logger.info("System probe task created")


def stop_system_probe() -> None:
    """Stop the system probe background task."""
    global _probe_task, _stop_event

    if _stop_event:
        _stop_event.set()

    if _probe_task and not _probe_task.done():
        _probe_task.cancel()

    _probe_task = None
    _stop_event = None
    logger.info("System probe stop requested")
