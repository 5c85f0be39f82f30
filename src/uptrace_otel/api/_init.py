"""Main SDK entry points: configure_opentelemetry(), shutdown(), is_configured().

This module provides the primary public interface for the SDK.
"""

from __future__ import annotations

import atexit
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from opentelemetry import trace

from uptrace_otel.sdk import lifecycle
from uptrace_otel.sdk.builder import UptraceBuilder

if TYPE_CHECKING:
    from opentelemetry.sdk.resources import Resource, ResourceDetector
    from opentelemetry.sdk.trace.sampling import Sampler

    from uptrace_otel.api.types import Attributes, BatchConfig, MetricsConfig
    from uptrace_otel.sdk.lifecycle import Uptrace
    from uptrace_otel.sdk.pipeline import ExportTransport

logger = logging.getLogger(__name__)

_atexit_registered = False


def configure_opentelemetry(
    dsn: str | None = None,
    *,
    service_name: str | None = None,
    service_version: str | None = None,
    deployment_environment: str | None = None,
    resource: Resource | None = None,
    resource_attributes: Attributes | None = None,
    resource_detectors: list[ResourceDetector] | None = None,
    tracing_enabled: bool | None = None,
    metrics_enabled: bool | None = None,
    logs_enabled: bool | None = None,
    batch_config: BatchConfig | None = None,
    trace_timeout: float | None = None,
    metrics_config: MetricsConfig | None = None,
    trace_sampler: Sampler | None = None,
    pretty_print: bool | None = None,
    transport: ExportTransport | None = None,
    config_path: str | Path | None = None,
) -> Uptrace:
    """Configure OpenTelemetry to export to Uptrace.

    This is the single entry point for SDK initialization. Options are
    resolved in this order, later wins:
    - The UPTRACE_DSN environment variable
    - The YAML file at ``config_path``, if given
    - Keyword arguments that are not None

    After a successful call:
    - The providers are installed as the OpenTelemetry global providers
    - An atexit handler is registered for automatic shutdown
    - is_configured() returns True

    Args:
        dsn: Uptrace DSN.
        service_name: Value for the ``service.name`` resource attribute.
        service_version: Value for ``service.version``.
        deployment_environment: Value for ``deployment.environment``.
        resource: Resource whose attributes are merged into the final one.
        resource_attributes: Extra resource attributes.
        resource_detectors: Detectors replacing the default ones.
        tracing_enabled: Build the trace pipeline (default True).
        metrics_enabled: Build the metrics pipeline (default True).
        logs_enabled: Build the logs pipeline (default False).
        batch_config: Span batch processor tuning.
        trace_timeout: Span exporter timeout in seconds.
        metrics_config: Periodic metric reader tuning.
        trace_sampler: Sampler for the TracerProvider.
        pretty_print: Also print finished spans to stdout.
        transport: Transport replacing the OTLP/gRPC one.
        config_path: YAML configuration file.

    Returns:
        The Uptrace handle; inactive when telemetry is disabled.

    Raises:
        ConfigurationError: If the configuration is invalid or missing.
        PipelineBuildError: If an export pipeline cannot be constructed.
    """
    global _atexit_registered

    if config_path is not None:
        builder = UptraceBuilder.from_config_file(config_path)
    else:
        builder = UptraceBuilder()

    if dsn is not None:
        builder.with_dsn(dsn)
    if service_name is not None:
        builder.with_service_name(service_name)
    if service_version is not None:
        builder.with_service_version(service_version)
    if deployment_environment is not None:
        builder.with_deployment_environment(deployment_environment)
    if resource is not None:
        builder.with_resource(resource)
    if resource_attributes is not None:
        builder.with_resource_attributes(resource_attributes)
    if resource_detectors is not None:
        builder.with_resource_detectors(resource_detectors)
    if tracing_enabled is not None:
        builder.with_tracing_enabled(tracing_enabled)
    if metrics_enabled is not None:
        builder.with_metrics_enabled(metrics_enabled)
    if logs_enabled is not None:
        builder.with_logs_enabled(logs_enabled)
    if batch_config is not None:
        builder.with_batch_config(batch_config)
    if trace_timeout is not None:
        builder.with_trace_timeout(trace_timeout)
    if metrics_config is not None:
        builder.with_metrics_config(metrics_config)
    if trace_sampler is not None:
        builder.with_trace_sampler(trace_sampler)
    if pretty_print is not None:
        builder.with_pretty_print(pretty_print)
    if transport is not None:
        builder.with_transport(transport)

    handle = builder.build()
    if not handle.active:
        return handle

    lifecycle.set_configured(handle)
    handle.set_global()
    if not _atexit_registered:
        atexit.register(lifecycle.shutdown)
        _atexit_registered = True
    logger.debug("SDK configured with DSN %r", handle.dsn)
    return handle


def shutdown() -> None:
    """Shutdown the SDK and flush pending telemetry.

    It is idempotent and safe to call multiple times.
    """
    lifecycle.shutdown()


def force_flush(timeout_millis: int = 30000) -> bool:
    """Flush pending telemetry without shutting down.

    Returns:
        True if every pipeline flushed successfully.
    """
    return lifecycle.force_flush(timeout_millis=timeout_millis)


def is_configured() -> bool:
    """Check if the SDK has been configured.

    Returns:
        True if configure_opentelemetry() installed an active handle.
    """
    return lifecycle.is_configured()


def trace_url(span: trace.Span | None = None) -> str | None:
    """Return the Uptrace UI link for the trace of ``span``.

    Args:
        span: Span to link to; defaults to the current span.

    Returns:
        The URL, or None when the SDK is not configured or the span is
        not recording a valid trace.
    """
    handle = lifecycle.get_handle()
    if handle is None or handle.dsn is None:
        return None

    if span is None:
        span = trace.get_current_span()
    context = span.get_span_context()
    if not context.is_valid:
        return None

    trace_id = trace.format_trace_id(context.trace_id)
    return f"{handle.dsn.app_addr()}/traces/{trace_id}"
