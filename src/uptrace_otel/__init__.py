"""Uptrace distribution of OpenTelemetry for Python.

Configure traces, metrics and logs export to Uptrace from a single DSN:

    import uptrace_otel

    uptrace_otel.configure_opentelemetry(
        dsn="https://<token>@uptrace.dev/<project_id>",
        service_name="myservice",
        service_version="1.0.0",
    )
"""

from __future__ import annotations

from uptrace_otel.api import (
    BatchConfig,
    MetricsConfig,
    ServiceConfig,
    UptraceConfig,
    configure_opentelemetry,
    force_flush,
    is_configured,
    shutdown,
    trace_url,
)
from uptrace_otel.dsn import Dsn, parse_dsn
from uptrace_otel.exceptions import (
    BuilderConsumedError,
    ConfigurationError,
    EmptyConnectionString,
    InvalidConnectionString,
    LogsBuildError,
    MetricsBuildError,
    MissingConnectionString,
    PipelineBuildError,
    TraceBuildError,
    UptraceError,
)
from uptrace_otel.sdk.builder import UptraceBuilder
from uptrace_otel.sdk.config.load import load_config
from uptrace_otel.sdk.lifecycle import Uptrace

__version__ = "0.1.0"

__all__ = [
    "BatchConfig",
    "BuilderConsumedError",
    "ConfigurationError",
    "Dsn",
    "EmptyConnectionString",
    "InvalidConnectionString",
    "LogsBuildError",
    "MetricsBuildError",
    "MetricsConfig",
    "MissingConnectionString",
    "PipelineBuildError",
    "ServiceConfig",
    "TraceBuildError",
    "Uptrace",
    "UptraceBuilder",
    "UptraceConfig",
    "UptraceError",
    "__version__",
    "configure_opentelemetry",
    "force_flush",
    "is_configured",
    "load_config",
    "parse_dsn",
    "shutdown",
    "trace_url",
]
