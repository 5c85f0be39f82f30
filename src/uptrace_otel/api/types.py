"""Public configuration types for the uptrace_otel SDK.

These types are part of the stable public API and follow semver guarantees.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

# Header carrying the raw DSN on every OTLP request
DSN_HEADER = "uptrace-dsn"

DEFAULT_TRACE_TIMEOUT = 5.0
DEFAULT_METRICS_TIMEOUT = 10.0
DEFAULT_LOGS_TIMEOUT = 5.0

DEFAULT_MAX_QUEUE_SIZE = 30000
DEFAULT_MAX_EXPORT_BATCH_SIZE = 10000
DEFAULT_SCHEDULED_DELAY_MILLIS = 5000
DEFAULT_EXPORT_TIMEOUT_MILLIS = 30000

DEFAULT_EXPORT_INTERVAL_MILLIS = 15000
DEFAULT_METRICS_EXPORT_TIMEOUT_MILLIS = 5000

AttributeValue = Any
Attributes = Mapping[str, AttributeValue]


@dataclass
class ServiceConfig:
    """Service identification configuration."""

    name: str | None = None
    version: str | None = None
    deployment_environment: str | None = None


@dataclass
class BatchConfig:
    """Batch processor tuning.

    Unset fields are filled with the SDK defaults by :meth:`resolved`, so a
    partially populated config only overrides what it sets.
    """

    max_queue_size: int | None = None
    max_export_batch_size: int | None = None
    scheduled_delay_millis: int | None = None
    export_timeout_millis: int | None = None

    def resolved(self) -> BatchConfig:
        """Return a copy with every unset field defaulted."""
        return BatchConfig(
            max_queue_size=_or(self.max_queue_size, DEFAULT_MAX_QUEUE_SIZE),
            max_export_batch_size=_or(
                self.max_export_batch_size, DEFAULT_MAX_EXPORT_BATCH_SIZE
            ),
            scheduled_delay_millis=_or(
                self.scheduled_delay_millis, DEFAULT_SCHEDULED_DELAY_MILLIS
            ),
            export_timeout_millis=_or(
                self.export_timeout_millis, DEFAULT_EXPORT_TIMEOUT_MILLIS
            ),
        )


@dataclass
class MetricsConfig:
    """Periodic metric reader tuning."""

    export_interval_millis: int | None = None
    export_timeout_millis: int | None = None

    def resolved(self) -> MetricsConfig:
        """Return a copy with every unset field defaulted."""
        return replace(
            self,
            export_interval_millis=_or(
                self.export_interval_millis, DEFAULT_EXPORT_INTERVAL_MILLIS
            ),
            export_timeout_millis=_or(
                self.export_timeout_millis, DEFAULT_METRICS_EXPORT_TIMEOUT_MILLIS
            ),
        )


@dataclass
class TraceExportConfig:
    """Fully resolved input for the trace pipeline."""

    endpoint: str
    headers: dict[str, str]
    timeout: float
    insecure: bool
    attributes: dict[str, AttributeValue]
    batch: BatchConfig
    sampler: Any = None
    pretty_print: bool = False


@dataclass
class MetricsExportConfig:
    """Fully resolved input for the metrics pipeline."""

    endpoint: str
    headers: dict[str, str]
    timeout: float
    insecure: bool
    attributes: dict[str, AttributeValue]
    reader: MetricsConfig


@dataclass
class LogsExportConfig:
    """Fully resolved input for the logs pipeline."""

    endpoint: str
    headers: dict[str, str]
    timeout: float
    insecure: bool
    attributes: dict[str, AttributeValue]
    batch: BatchConfig


@dataclass
class TracingConfig:
    """Tracing section of the configuration file."""

    enabled: bool = True
    timeout: float | None = None
    pretty_print: bool = False
    batch: BatchConfig = field(default_factory=BatchConfig)


@dataclass
class MetricsSectionConfig:
    """Metrics section of the configuration file."""

    enabled: bool = True
    reader: MetricsConfig = field(default_factory=MetricsConfig)


@dataclass
class LogsConfig:
    """Logs section of the configuration file."""

    enabled: bool = False


@dataclass
class UptraceConfig:
    """Complete file-based SDK configuration.

    Every field is optional; a missing DSN falls back to UPTRACE_DSN.
    """

    dsn: str | None = None
    service: ServiceConfig = field(default_factory=ServiceConfig)
    resource_attributes: dict[str, AttributeValue] = field(default_factory=dict)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    metrics: MetricsSectionConfig = field(default_factory=MetricsSectionConfig)
    logs: LogsConfig = field(default_factory=LogsConfig)


def _or(value: int | None, default: int) -> int:
    return default if value is None else value
