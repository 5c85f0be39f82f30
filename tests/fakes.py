"""Test fakes for the export transport.

This module provides typed test doubles (fakes) that validate usage and
document expected API surfaces. Prefer these over MagicMock for better
type safety and self-documenting tests.

Following the testing philosophy:
- Fakes are working implementations with shortcuts
- They validate usage patterns (unlike MagicMock which accepts anything)
- They catch typos and API drift at test time
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.resources import Resource, ResourceDetector
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

if TYPE_CHECKING:
    from uptrace_otel.api.types import (
        LogsExportConfig,
        MetricsExportConfig,
        TraceExportConfig,
    )

LOCAL_DSN = "http://project2_secret_token@localhost:14317/2"
CLOUD_DSN = "https://secret@uptrace.dev/1"


class CountingTracerProvider(TracerProvider):
    """TracerProvider that counts shutdown() calls."""

    shutdown_calls = 0

    def shutdown(self) -> None:
        self.shutdown_calls += 1
        super().shutdown()


class CountingMeterProvider(MeterProvider):
    """MeterProvider that counts shutdown() calls."""

    shutdown_calls = 0

    def shutdown(self, timeout_millis: float = 30_000) -> None:
        self.shutdown_calls += 1
        super().shutdown(timeout_millis=timeout_millis)


class CountingLoggerProvider(LoggerProvider):
    """LoggerProvider that counts shutdown() calls."""

    shutdown_calls = 0

    def shutdown(self) -> None:
        self.shutdown_calls += 1
        super().shutdown()


class FakeTransport:
    """Test double for OTLPGrpcTransport.

    Records every config it receives and returns real SDK providers wired
    to in-memory exporters, so spans and metrics can be inspected without
    any network. Pass ``fail_on`` to make a stage raise.

    Usage:
        transport = FakeTransport(fail_on={"metrics"})
        builder.with_transport(transport)
    """

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.span_exporter = InMemorySpanExporter()
        self.metric_reader: InMemoryMetricReader | None = None

        self.trace_configs: list[TraceExportConfig] = []
        self.metrics_configs: list[MetricsExportConfig] = []
        self.logs_configs: list[LogsExportConfig] = []

        self.tracer_providers: list[CountingTracerProvider] = []
        self.meter_providers: list[CountingMeterProvider] = []
        self.logger_providers: list[CountingLoggerProvider] = []

    def create_tracer_provider(
        self, config: TraceExportConfig
    ) -> CountingTracerProvider:
        self.trace_configs.append(config)
        if "trace" in self.fail_on:
            raise RuntimeError("trace transport unavailable")
        provider = CountingTracerProvider(resource=Resource(config.attributes))
        provider.add_span_processor(SimpleSpanProcessor(self.span_exporter))
        self.tracer_providers.append(provider)
        return provider

    def create_meter_provider(
        self, config: MetricsExportConfig
    ) -> CountingMeterProvider:
        self.metrics_configs.append(config)
        if "metrics" in self.fail_on:
            raise RuntimeError("metrics transport unavailable")
        # A reader can only belong to one MeterProvider
        self.metric_reader = InMemoryMetricReader()
        provider = CountingMeterProvider(
            metric_readers=[self.metric_reader],
            resource=Resource(config.attributes),
        )
        self.meter_providers.append(provider)
        return provider

    def create_logger_provider(
        self, config: LogsExportConfig
    ) -> CountingLoggerProvider:
        self.logs_configs.append(config)
        if "logs" in self.fail_on:
            raise RuntimeError("logs transport unavailable")
        provider = CountingLoggerProvider(resource=Resource(config.attributes))
        self.logger_providers.append(provider)
        return provider

    @property
    def calls(self) -> int:
        return len(self.trace_configs) + len(self.metrics_configs) + len(
            self.logs_configs
        )


class StaticDetector(ResourceDetector):
    """Resource detector returning fixed attributes, or raising."""

    def __init__(
        self,
        attributes: dict[str, str] | None = None,
        error: Exception | None = None,
    ) -> None:
        super().__init__()
        self.attributes = attributes or {}
        self.error = error

    def detect(self) -> Resource:
        if self.error is not None:
            raise self.error
        return Resource(self.attributes)
