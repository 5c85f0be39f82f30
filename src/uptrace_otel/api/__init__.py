"""Public API for the uptrace_otel SDK.

This module re-exports the stable public interface:
- configure_opentelemetry() - Configure and install the pipelines
- shutdown() - Shutdown the SDK and flush telemetry
- force_flush() - Flush telemetry without shutting down
- is_configured() - Check if the SDK has been configured
- trace_url() - Uptrace UI link for a span
- Config and related types - Programmatic configuration
"""

from __future__ import annotations

from uptrace_otel.api._init import (
    configure_opentelemetry,
    force_flush,
    is_configured,
    shutdown,
    trace_url,
)
from uptrace_otel.api.types import (
    BatchConfig,
    LogsConfig,
    MetricsConfig,
    MetricsSectionConfig,
    ServiceConfig,
    TracingConfig,
    UptraceConfig,
)

__all__ = [
    "configure_opentelemetry",
    "shutdown",
    "force_flush",
    "is_configured",
    "trace_url",
    "UptraceConfig",
    "ServiceConfig",
    "BatchConfig",
    "MetricsConfig",
    "TracingConfig",
    "MetricsSectionConfig",
    "LogsConfig",
]
