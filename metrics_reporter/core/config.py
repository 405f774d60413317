import os
from datetime import timedelta
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from metrics_reporter.services.cloudwatch.filter import FilterPolicy, NoFilter, PatternFilter


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def parse_dimensions(raw: str) -> Dict[str, str]:
    """Parse ``key=value,key2=value2`` into a dict. Blank entries are ignored."""
    dimensions: Dict[str, str] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid dimension entry {item!r}, expected key=value")
        dimensions[key.strip()] = value.strip()
    return dimensions


class Settings:
    # Reporter Settings
    PROJECT_NAME: str = "CloudWatch Metrics Reporter"
    VERSION: str = "0.4.0"
    NAMESPACE: str = os.getenv("REPORTER_NAMESPACE", "")
    INTERVAL_SECONDS: float = float(os.getenv("REPORTER_INTERVAL_SECONDS", 60))
    DIMENSIONS: str = os.getenv("REPORTER_DIMENSIONS", "")
    RESET_COUNTERS: bool = _env_bool("REPORTER_RESET_COUNTERS", "false")
    DEBUG: bool = _env_bool("REPORTER_DEBUG", "false")
    FILTER: str = os.getenv("REPORTER_FILTER", "")
    SINK: str = os.getenv("REPORTER_SINK", "cloudwatch")  # "cloudwatch" or "log"

    # System Probe Settings
    SYSTEM_PROBE_ENABLED: bool = _env_bool("REPORTER_SYSTEM_PROBE", "true")
    PROBE_INTERVAL_SECONDS: float = float(os.getenv("REPORTER_PROBE_INTERVAL_SECONDS", 10))


settings = Settings()


class ReporterConfig(BaseModel):
    """Validated, read-only view of the reporter configuration.

    Built once at startup; the collection core never sees an invalid config.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    namespace: str
    reporting_interval: timedelta = timedelta(seconds=60)
    static_dimensions: Dict[str, str] = Field(default_factory=dict)
    reset_counters_on_report: bool = False
    debug: bool = False
    filter: FilterPolicy = Field(default_factory=NoFilter)

    @field_validator("namespace")
    @classmethod
    def _namespace_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("namespace must not be empty")
        return value

    @field_validator("reporting_interval")
    @classmethod
    def _interval_positive(cls, value: timedelta) -> timedelta:
        if value.total_seconds() <= 0:
            raise ValueError("reporting_interval must be positive")
        return value

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None) -> "ReporterConfig":
        source = source or settings
        policy: FilterPolicy = PatternFilter.from_spec(source.FILTER) if source.FILTER else NoFilter()
        return cls(
            namespace=source.NAMESPACE,
            reporting_interval=timedelta(seconds=source.INTERVAL_SECONDS),
            static_dimensions=parse_dimensions(source.DIMENSIONS),
            reset_counters_on_report=source.RESET_COUNTERS,
            debug=source.DEBUG,
            filter=policy,
        )
