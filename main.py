"""
CloudWatch Metrics Reporter

Periodically ships the in-process metrics registry to Amazon CloudWatch.

Environment Variables:
    REPORTER_NAMESPACE: CloudWatch namespace (required)
    REPORTER_INTERVAL_SECONDS: Reporting interval in seconds (default: 60)
    REPORTER_DIMENSIONS: Static dimensions as key=value,key2=value2
    REPORTER_RESET_COUNTERS: Clear counters after each report (default: false)
    REPORTER_FILTER: Filter rules as pattern:report[:p1|p2];... (default: report all)
    REPORTER_SINK: 'cloudwatch' or 'log' for a dry run (default: cloudwatch)
    REPORTER_SYSTEM_PROBE: Sample CPU/memory/thread gauges (default: true)
    REPORTER_DEBUG: Log every put and skipped metric (default: false)

CLI Usage:
    REPORTER_NAMESPACE=MyService python main.py

    # Dry run, print data points every 10 seconds
    REPORTER_NAMESPACE=MyService REPORTER_SINK=log REPORTER_INTERVAL_SECONDS=10 python main.py
"""

import asyncio
import signal

from metrics_reporter.core.config import ReporterConfig, settings
from metrics_reporter.core.logging_config import get_logger
from metrics_reporter.services.cloudwatch.aws_config import create_cloudwatch_client
from metrics_reporter.services.cloudwatch.reporter import start_cloudwatch_reporter, stop_cloudwatch_reporter
from metrics_reporter.services.cloudwatch.transport import CloudWatchSink, LoggingSink, MetricsSink
from metrics_reporter.services.metrics import get_registry
from metrics_reporter.services.metrics.system_probe import start_system_probe, stop_system_probe

logger = get_logger("main")


def build_sink() -> MetricsSink:
    if settings.SINK == "log":
        return LoggingSink()
    return CloudWatchSink(create_cloudwatch_client())


async def main() -> None:
    config = ReporterConfig.from_settings()
    registry = get_registry()

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    if settings.SYSTEM_PROBE_ENABLED:
        start_system_probe(registry, settings.PROBE_INTERVAL_SECONDS)
    start_cloudwatch_reporter(registry, config, build_sink())

    await stop.wait()

    stop_system_probe()
    await stop_cloudwatch_reporter(timeout=30.0)


if __name__ == "__main__":
    print(f"Starting {settings.PROJECT_NAME} {settings.VERSION}")
    print(f"Sink: {settings.SINK}, system probe: {'enabled' if settings.SYSTEM_PROBE_ENABLED else 'disabled'}")
    asyncio.run(main())
