"""Shared pytest configuration and fixtures.

This module provides test fixtures that:
1. Reset OpenTelemetry global state between tests for isolation
2. Remove UPTRACE_* environment variables so tests control configuration
3. Provide a FakeTransport instead of the OTLP/gRPC exporters

Following OpenTelemetry Python SDK testing patterns.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generator

import pytest
from opentelemetry import trace as trace_api
from opentelemetry.util._once import Once

from tests.fakes import LOCAL_DSN, FakeTransport

if TYPE_CHECKING:
    from pathlib import Path


def _reset_trace_globals() -> None:
    """Reset OpenTelemetry trace globals for test isolation.

    WARNING: Only use this in tests. This accesses internal OTel APIs.
    """
    trace_api._TRACER_PROVIDER_SET_ONCE = Once()
    trace_api._TRACER_PROVIDER = None
    trace_api._PROXY_TRACER_PROVIDER = trace_api.ProxyTracerProvider()


def _reset_metrics_globals() -> None:
    """Reset OpenTelemetry metrics globals for test isolation."""
    from opentelemetry.metrics import _internal as metrics_internal

    metrics_internal._METER_PROVIDER_SET_ONCE = Once()
    metrics_internal._METER_PROVIDER = None


def _reset_logs_globals() -> None:
    """Reset OpenTelemetry logs globals for test isolation."""
    from opentelemetry._logs import _internal as logs_internal

    logs_internal._LOGGER_PROVIDER_SET_ONCE = Once()
    logs_internal._LOGGER_PROVIDER = None


def _reset_sdk_state() -> None:
    """Reset the uptrace_otel SDK state for test isolation."""
    from uptrace_otel.sdk import lifecycle

    handle = lifecycle._handle
    if handle is not None:
        handle.shutdown()
    lifecycle._configured = False
    lifecycle._handle = None


@pytest.fixture(autouse=True)
def reset_otel_state() -> Generator[None, None, None]:
    """Reset OpenTelemetry and SDK global state before and after each test."""
    _reset_sdk_state()
    _reset_trace_globals()
    _reset_metrics_globals()
    _reset_logs_globals()
    yield
    _reset_sdk_state()
    _reset_trace_globals()
    _reset_metrics_globals()
    _reset_logs_globals()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove UPTRACE_* and OTEL resource variables from the environment."""
    for name in (
        "UPTRACE_DSN",
        "UPTRACE_DISABLED",
        "OTEL_RESOURCE_ATTRIBUTES",
        "OTEL_SERVICE_NAME",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Provide a FakeTransport recording the configs it receives.

    Usage:
        def test_something(fake_transport):
            UptraceBuilder().with_dsn(LOCAL_DSN).with_transport(fake_transport).build()
            assert fake_transport.trace_configs[0].endpoint == "http://localhost:14317"
    """
    return FakeTransport()


@pytest.fixture
def uptrace_module() -> Any:
    """Import and return the uptrace_otel module."""
    import uptrace_otel

    return uptrace_otel


@pytest.fixture
def valid_config_content() -> str:
    """Return valid YAML config content for tests."""
    return f"""dsn: {LOCAL_DSN}

service:
  name: test-service
  version: "1.0.0"
  deployment_environment: testing

resource_attributes:
  team: observability

tracing:
  enabled: true
  timeout: 2.5
  batch:
    max_queue_size: 2048
    max_export_batch_size: 512

metrics:
  enabled: false

logs:
  enabled: true
"""


@pytest.fixture
def valid_config_file(tmp_path: "Path", valid_config_content: str) -> "Path":
    """Create a valid config file and return its path."""
    config_path = tmp_path / "uptrace.yaml"
    config_path.write_text(valid_config_content)
    return config_path
