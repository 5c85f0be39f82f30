"""Export transport: builds OpenTelemetry providers from resolved configs.

This module is responsible for:
- Constructing tracer, meter and logger providers wired to OTLP/gRPC exporters
- Nothing else: providers are never registered globally here
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import (
    Counter,
    Histogram,
    MeterProvider,
    ObservableCounter,
    ObservableGauge,
    ObservableUpDownCounter,
    UpDownCounter,
)
from opentelemetry.sdk.metrics.export import (
    AggregationTemporality,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)

if TYPE_CHECKING:
    from uptrace_otel.api.types import (
        LogsExportConfig,
        MetricsExportConfig,
        TraceExportConfig,
    )

logger = logging.getLogger(__name__)

# Uptrace expects delta counters and histograms
PREFERRED_TEMPORALITY: dict[type, AggregationTemporality] = {
    Counter: AggregationTemporality.DELTA,
    UpDownCounter: AggregationTemporality.CUMULATIVE,
    Histogram: AggregationTemporality.DELTA,
    ObservableCounter: AggregationTemporality.DELTA,
    ObservableUpDownCounter: AggregationTemporality.CUMULATIVE,
    ObservableGauge: AggregationTemporality.CUMULATIVE,
}


class Flushable(Protocol):
    """What the SDK needs from a constructed provider."""

    def force_flush(self, timeout_millis: int = ...) -> bool: ...

    def shutdown(self) -> object: ...


class ExportTransport(Protocol):
    """Constructs export pipelines from fully resolved configuration.

    Implementations must not register anything with the OpenTelemetry
    global registries; the caller decides when to do that.
    """

    def create_tracer_provider(self, config: TraceExportConfig) -> Flushable:
        """Return a tracer provider exporting to ``config.endpoint``."""
        ...

    def create_meter_provider(self, config: MetricsExportConfig) -> Flushable:
        """Return a meter provider exporting to ``config.endpoint``."""
        ...

    def create_logger_provider(self, config: LogsExportConfig) -> Flushable:
        """Return a logger provider exporting to ``config.endpoint``."""
        ...


class OTLPGrpcTransport:
    """Default transport backed by the OpenTelemetry SDK and OTLP/gRPC."""

    def create_tracer_provider(self, config: TraceExportConfig) -> TracerProvider:
        exporter = OTLPSpanExporter(
            endpoint=config.endpoint,
            insecure=config.insecure,
            headers=config.headers,
            timeout=config.timeout,
        )
        batch = config.batch.resolved()
        processor = BatchSpanProcessor(
            exporter,
            max_queue_size=batch.max_queue_size,
            schedule_delay_millis=batch.scheduled_delay_millis,
            max_export_batch_size=batch.max_export_batch_size,
            export_timeout_millis=batch.export_timeout_millis,
        )

        provider = TracerProvider(
            sampler=config.sampler,
            resource=Resource(config.attributes),
        )
        if config.pretty_print:
            provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
        provider.add_span_processor(processor)

        logger.debug(
            "TracerProvider created: endpoint=%s, insecure=%s, batch=%s",
            config.endpoint,
            config.insecure,
            batch,
        )
        return provider

    def create_meter_provider(self, config: MetricsExportConfig) -> MeterProvider:
        exporter = OTLPMetricExporter(
            endpoint=config.endpoint,
            insecure=config.insecure,
            headers=config.headers,
            timeout=config.timeout,
            preferred_temporality=PREFERRED_TEMPORALITY,
        )
        settings = config.reader.resolved()
        reader = PeriodicExportingMetricReader(
            exporter,
            export_interval_millis=settings.export_interval_millis,
            export_timeout_millis=settings.export_timeout_millis,
        )
        provider = MeterProvider(
            metric_readers=[reader],
            resource=Resource(config.attributes),
        )

        logger.debug(
            "MeterProvider created: endpoint=%s, interval=%sms",
            config.endpoint,
            settings.export_interval_millis,
        )
        return provider

    def create_logger_provider(self, config: LogsExportConfig) -> LoggerProvider:
        exporter = OTLPLogExporter(
            endpoint=config.endpoint,
            insecure=config.insecure,
            headers=config.headers,
            timeout=config.timeout,
        )
        batch = config.batch.resolved()
        provider = LoggerProvider(resource=Resource(config.attributes))
        provider.add_log_record_processor(
            BatchLogRecordProcessor(
                exporter,
                max_queue_size=batch.max_queue_size,
                schedule_delay_millis=batch.scheduled_delay_millis,
                max_export_batch_size=batch.max_export_batch_size,
                export_timeout_millis=batch.export_timeout_millis,
            )
        )

        logger.debug("LoggerProvider created: endpoint=%s", config.endpoint)
        return provider
