"""UptraceBuilder: accumulates options and builds the telemetry pipelines."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from uptrace_otel._internal.logging import log_configured, log_disabled
from uptrace_otel.api.types import (
    DEFAULT_LOGS_TIMEOUT,
    DEFAULT_METRICS_TIMEOUT,
    DEFAULT_TRACE_TIMEOUT,
    DSN_HEADER,
    BatchConfig,
    LogsExportConfig,
    MetricsConfig,
    MetricsExportConfig,
    TraceExportConfig,
)
from uptrace_otel.dsn import Dsn
from uptrace_otel.exceptions import (
    BuilderConsumedError,
    LogsBuildError,
    MetricsBuildError,
    MissingConnectionString,
    TraceBuildError,
)
from uptrace_otel.sdk.config.load import load_config
from uptrace_otel.sdk.lifecycle import Uptrace
from uptrace_otel.sdk.pipeline import OTLPGrpcTransport
from uptrace_otel.sdk.resource import default_detectors, resolve_resource_attributes

if TYPE_CHECKING:
    from opentelemetry.sdk.resources import Resource, ResourceDetector
    from opentelemetry.sdk.trace.sampling import Sampler

    from uptrace_otel.api.types import Attributes, AttributeValue, UptraceConfig
    from uptrace_otel.sdk.pipeline import ExportTransport, Flushable


UPTRACE_DSN_ENV = "UPTRACE_DSN"
UPTRACE_DISABLED_ENV = "UPTRACE_DISABLED"


class UptraceBuilder:
    """Collects pipeline options and turns them into an :class:`Uptrace` handle.

    Setters return the builder so calls can be chained::

        handle = (
            UptraceBuilder()
            .with_dsn("https://<token>@uptrace.dev/<project_id>")
            .with_service_name("myservice")
            .with_metrics_disabled()
            .build()
        )

    A builder can be built only once.
    """

    def __init__(self) -> None:
        self._dsn: str | None = os.environ.get(UPTRACE_DSN_ENV) or None

        self._service_name: str | None = None
        self._service_version: str | None = None
        self._deployment_environment: str | None = None

        self._resource: Resource | None = None
        self._resource_attributes: dict[str, AttributeValue] | None = None
        self._resource_detectors: list[ResourceDetector] | None = None

        self._tracing_enabled = True
        self._metrics_enabled = True
        self._logs_enabled = False

        self._batch_config: BatchConfig | None = None
        self._trace_timeout: float | None = None
        self._trace_sampler: Sampler | None = None
        self._pretty_print = False
        self._metrics_config: MetricsConfig | None = None

        self._transport: ExportTransport | None = None
        self._consumed = False

    @classmethod
    def from_config(cls, config: UptraceConfig) -> UptraceBuilder:
        """Create a builder seeded from a parsed configuration file."""
        builder = cls()
        if config.dsn:
            builder.with_dsn(config.dsn)
        if config.service.name:
            builder.with_service_name(config.service.name)
        if config.service.version:
            builder.with_service_version(config.service.version)
        if config.service.deployment_environment:
            builder.with_deployment_environment(config.service.deployment_environment)
        if config.resource_attributes:
            builder.with_resource_attributes(config.resource_attributes)

        builder.with_tracing_enabled(config.tracing.enabled)
        builder.with_batch_config(config.tracing.batch)
        if config.tracing.timeout is not None:
            builder.with_trace_timeout(config.tracing.timeout)
        builder.with_pretty_print(config.tracing.pretty_print)

        builder.with_metrics_enabled(config.metrics.enabled)
        builder.with_metrics_config(config.metrics.reader)
        builder.with_logs_enabled(config.logs.enabled)
        return builder

    @classmethod
    def from_config_file(cls, path: str | Path) -> UptraceBuilder:
        """Create a builder seeded from a YAML configuration file."""
        return cls.from_config(load_config(path))

    def with_dsn(self, dsn: str) -> UptraceBuilder:
        self._dsn = dsn
        return self

    def with_service_name(self, service_name: str) -> UptraceBuilder:
        self._service_name = service_name
        return self

    def with_service_version(self, service_version: str) -> UptraceBuilder:
        self._service_version = service_version
        return self

    def with_deployment_environment(self, deployment_environment: str) -> UptraceBuilder:
        self._deployment_environment = deployment_environment
        return self

    def with_resource(self, resource: Resource) -> UptraceBuilder:
        """Merge the attributes of an existing Resource into the final resource."""
        self._resource = resource
        return self

    def with_resource_attributes(self, attributes: Attributes) -> UptraceBuilder:
        self._resource_attributes = dict(attributes)
        return self

    def with_resource_detectors(
        self, detectors: Sequence[ResourceDetector]
    ) -> UptraceBuilder:
        """Replace the default resource detectors."""
        self._resource_detectors = list(detectors)
        return self

    def with_tracing_enabled(self, enabled: bool) -> UptraceBuilder:
        self._tracing_enabled = enabled
        return self

    def with_tracing_disabled(self) -> UptraceBuilder:
        return self.with_tracing_enabled(False)

    def with_metrics_enabled(self, enabled: bool) -> UptraceBuilder:
        self._metrics_enabled = enabled
        return self

    def with_metrics_disabled(self) -> UptraceBuilder:
        return self.with_metrics_enabled(False)

    def with_logs_enabled(self, enabled: bool = True) -> UptraceBuilder:
        self._logs_enabled = enabled
        return self

    def with_batch_config(self, batch_config: BatchConfig) -> UptraceBuilder:
        """Set span batch tuning; unset fields keep their defaults."""
        self._batch_config = batch_config
        return self

    def with_trace_timeout(self, timeout: float) -> UptraceBuilder:
        """Set the span exporter timeout in seconds."""
        self._trace_timeout = timeout
        return self

    def with_trace_sampler(self, sampler: Sampler) -> UptraceBuilder:
        self._trace_sampler = sampler
        return self

    def with_pretty_print(self, pretty_print: bool = True) -> UptraceBuilder:
        """Also print finished spans to stdout."""
        self._pretty_print = pretty_print
        return self

    def with_metrics_config(self, metrics_config: MetricsConfig) -> UptraceBuilder:
        self._metrics_config = metrics_config
        return self

    def with_transport(self, transport: ExportTransport) -> UptraceBuilder:
        """Replace the OTLP/gRPC transport used to construct the pipelines."""
        self._transport = transport
        return self

    def build(self) -> Uptrace:
        """Resolve the configuration and construct the pipelines.

        Nothing is registered globally; call :meth:`Uptrace.set_global` on
        the returned handle for that.

        Returns:
            An active handle, or an inactive one when telemetry is disabled
            through UPTRACE_DISABLED, by turning every pipeline off, or by
            a DSN with placeholder credentials.

        Raises:
            BuilderConsumedError: If the builder was already built.
            MissingConnectionString: If no DSN is configured.
            EmptyConnectionString: If the DSN is empty.
            InvalidConnectionString: If the DSN is malformed.
            TraceBuildError: If the trace pipeline cannot be constructed.
            MetricsBuildError: If the metrics pipeline cannot be constructed.
            LogsBuildError: If the logs pipeline cannot be constructed.
        """
        if self._consumed:
            raise BuilderConsumedError("UptraceBuilder.build() was already called")
        self._consumed = True

        if UPTRACE_DISABLED_ENV in os.environ:
            log_disabled(f"{UPTRACE_DISABLED_ENV} is set")
            return Uptrace.noop()

        if not (self._tracing_enabled or self._metrics_enabled or self._logs_enabled):
            log_disabled("all pipelines are turned off")
            return Uptrace.noop()

        raw_dsn, self._dsn = self._dsn, None
        if raw_dsn is None:
            raise MissingConnectionString()

        dsn = Dsn.parse(raw_dsn)
        if dsn.is_disabled():
            log_disabled("the DSN has placeholder credentials")
            return Uptrace.noop()

        attributes = self._resolve_attributes()
        transport = self._transport or OTLPGrpcTransport()
        headers = {DSN_HEADER: dsn.original}
        insecure = dsn.scheme == "http"

        tracer_provider: Flushable | None = None
        meter_provider: Flushable | None = None
        logger_provider: Flushable | None = None
        try:
            if self._tracing_enabled:
                trace_config = TraceExportConfig(
                    endpoint=dsn.otlp_grpc_addr(),
                    headers=dict(headers),
                    timeout=(
                        DEFAULT_TRACE_TIMEOUT
                        if self._trace_timeout is None
                        else self._trace_timeout
                    ),
                    insecure=insecure,
                    attributes=dict(attributes),
                    batch=(self._batch_config or BatchConfig()).resolved(),
                    sampler=self._trace_sampler,
                    pretty_print=self._pretty_print,
                )
                try:
                    tracer_provider = transport.create_tracer_provider(trace_config)
                except Exception as e:
                    raise TraceBuildError(f"span exporter build error: {e}") from e

            if self._metrics_enabled:
                metrics_config = MetricsExportConfig(
                    endpoint=dsn.otlp_grpc_addr(),
                    headers=dict(headers),
                    timeout=DEFAULT_METRICS_TIMEOUT,
                    insecure=insecure,
                    attributes=dict(attributes),
                    reader=(self._metrics_config or MetricsConfig()).resolved(),
                )
                try:
                    meter_provider = transport.create_meter_provider(metrics_config)
                except Exception as e:
                    raise MetricsBuildError(f"metric exporter build error: {e}") from e

            if self._logs_enabled:
                logs_config = LogsExportConfig(
                    endpoint=dsn.otlp_grpc_addr(),
                    headers=dict(headers),
                    timeout=DEFAULT_LOGS_TIMEOUT,
                    insecure=insecure,
                    attributes=dict(attributes),
                    batch=BatchConfig().resolved(),
                )
                try:
                    logger_provider = transport.create_logger_provider(logs_config)
                except Exception as e:
                    raise LogsBuildError(f"log exporter build error: {e}") from e
        except Exception:
            # Undo the stages that already succeeded
            Uptrace(
                dsn=dsn,
                tracer_provider=tracer_provider,
                meter_provider=meter_provider,
                logger_provider=logger_provider,
            ).shutdown()
            raise

        log_configured(dsn.app_addr())
        return Uptrace(
            dsn=dsn,
            tracer_provider=tracer_provider,
            meter_provider=meter_provider,
            logger_provider=logger_provider,
        )

    def _resolve_attributes(self) -> dict[str, AttributeValue]:
        detectors = self._resource_detectors
        if detectors is None:
            detectors = default_detectors()

        attributes = resolve_resource_attributes(
            detectors,
            resource=self._resource,
            attributes=self._resource_attributes,
            service_name=self._service_name,
            service_version=self._service_version,
            deployment_environment=self._deployment_environment,
        )
        self._resource = None
        self._resource_attributes = None
        self._resource_detectors = None
        self._service_name = None
        self._service_version = None
        self._deployment_environment = None
        return attributes
