"""Unit tests for the Uptrace handle and SDK state."""

from __future__ import annotations

from typing import Any

import pytest
from opentelemetry import metrics, propagate, trace

from uptrace_otel.sdk import lifecycle
from uptrace_otel.sdk.builder import UptraceBuilder
from uptrace_otel.sdk.lifecycle import Uptrace
from tests.fakes import LOCAL_DSN, FakeTransport


def _active_handle(transport: FakeTransport, **kwargs: Any) -> Uptrace:
    builder = (
        UptraceBuilder()
        .with_dsn(LOCAL_DSN)
        .with_resource_detectors([])
        .with_transport(transport)
    )
    if kwargs.get("logs"):
        builder.with_logs_enabled()
    return builder.build()


class ExplodingProvider:
    """Provider whose flush and shutdown always fail."""

    def __init__(self) -> None:
        self.shutdown_calls = 0

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        raise RuntimeError("flush failed")

    def shutdown(self) -> None:
        self.shutdown_calls += 1
        raise RuntimeError("shutdown failed")


@pytest.mark.unit
class TestShutdown:
    """Tests for Uptrace.shutdown()."""

    def test_noop_handle_never_shuts_down(self, fake_transport: FakeTransport) -> None:
        handle = Uptrace.noop()

        handle.shutdown()
        handle.shutdown()

        assert not handle.active
        assert fake_transport.calls == 0

    def test_active_handle_shuts_down_once(self, fake_transport: FakeTransport) -> None:
        """
        GIVEN an active handle with trace, metrics and logs pipelines
        WHEN shutdown() is called twice
        THEN every provider is shut down exactly once
        """
        handle = _active_handle(fake_transport, logs=True)

        handle.shutdown()
        handle.shutdown()

        assert not handle.active
        assert fake_transport.tracer_providers[0].shutdown_calls == 1
        assert fake_transport.meter_providers[0].shutdown_calls == 1
        assert fake_transport.logger_providers[0].shutdown_calls == 1

    def test_context_manager_shuts_down(self, fake_transport: FakeTransport) -> None:
        with _active_handle(fake_transport) as handle:
            assert handle.active

        assert not handle.active
        assert fake_transport.tracer_providers[0].shutdown_calls == 1
        handle.shutdown()
        assert fake_transport.tracer_providers[0].shutdown_calls == 1

    def test_failing_provider_does_not_block_others(
        self, fake_transport: FakeTransport, caplog: pytest.LogCaptureFixture
    ) -> None:
        exploding = ExplodingProvider()
        handle = _active_handle(fake_transport)
        handle.tracer_provider = exploding

        handle.shutdown()

        assert exploding.shutdown_calls == 1
        assert fake_transport.meter_providers[0].shutdown_calls == 1
        assert "TracerProvider.shutdown" in caplog.text


@pytest.mark.unit
class TestForceFlush:
    """Tests for Uptrace.force_flush()."""

    def test_noop_handle_flush_succeeds(self) -> None:
        assert Uptrace.noop().force_flush() is True

    def test_active_handle_flushes(self, fake_transport: FakeTransport) -> None:
        handle = _active_handle(fake_transport)

        assert handle.force_flush(timeout_millis=1000) is True
        handle.shutdown()

    def test_failing_flush_returns_false(self, fake_transport: FakeTransport) -> None:
        handle = _active_handle(fake_transport)
        real_provider = handle.tracer_provider
        handle.tracer_provider = ExplodingProvider()

        assert handle.force_flush() is False

        handle.tracer_provider = real_provider
        handle.shutdown()


@pytest.mark.unit
class TestSetGlobal:
    """Tests for Uptrace.set_global()."""

    def test_installs_global_providers(self, fake_transport: FakeTransport) -> None:
        handle = _active_handle(fake_transport)

        handle.set_global()

        assert trace.get_tracer_provider() is handle.tracer_provider
        assert metrics.get_meter_provider() is handle.meter_provider
        fields = propagate.get_global_textmap().fields
        assert "traceparent" in fields
        assert "baggage" in fields
        handle.shutdown()

    def test_noop_handle_installs_nothing(self) -> None:
        before = trace.get_tracer_provider()

        Uptrace.noop().set_global()

        assert trace.get_tracer_provider() is before

    def test_registers_at_most_once(
        self, fake_transport: FakeTransport, caplog: pytest.LogCaptureFixture
    ) -> None:
        handle = _active_handle(fake_transport)

        handle.set_global()
        handle.set_global()

        assert "Overriding of current TracerProvider is not allowed" not in caplog.text
        handle.shutdown()


@pytest.mark.unit
class TestModuleState:
    """Tests for the configured-handle state."""

    def test_initially_not_configured(self) -> None:
        assert not lifecycle.is_configured()
        assert lifecycle.get_handle() is None
        assert lifecycle.force_flush() is True

    def test_set_configured_and_shutdown(self, fake_transport: FakeTransport) -> None:
        handle = _active_handle(fake_transport)

        lifecycle.set_configured(handle)
        assert lifecycle.is_configured()
        assert lifecycle.get_handle() is handle

        lifecycle.shutdown()
        lifecycle.shutdown()

        assert not lifecycle.is_configured()
        assert lifecycle.get_handle() is None
        assert fake_transport.tracer_providers[0].shutdown_calls == 1

    def test_reconfigure_warns(
        self, fake_transport: FakeTransport, caplog: pytest.LogCaptureFixture
    ) -> None:
        lifecycle.set_configured(_active_handle(fake_transport))
        lifecycle.set_configured(_active_handle(FakeTransport()))

        assert "SDK already configured" in caplog.text

    def test_reconfigure_shuts_down_previous_handle(
        self, fake_transport: FakeTransport
    ) -> None:
        """
        GIVEN an installed handle
        WHEN a second handle is installed
        THEN the first handle is shut down
        AND the second one stays active
        """
        first = _active_handle(fake_transport)
        second_transport = FakeTransport()
        second = _active_handle(second_transport)

        lifecycle.set_configured(first)
        lifecycle.set_configured(second)

        assert not first.active
        assert fake_transport.tracer_providers[0].shutdown_calls == 1
        assert second.active
        assert lifecycle.get_handle() is second

    def test_setting_same_handle_keeps_it_active(
        self, fake_transport: FakeTransport
    ) -> None:
        handle = _active_handle(fake_transport)

        lifecycle.set_configured(handle)
        lifecycle.set_configured(handle)

        assert handle.active
