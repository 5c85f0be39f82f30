"""Pipeline handle and global SDK state management.

This module manages:
- The Uptrace handle returned by a successful build
- Registration of its providers with the OpenTelemetry global registries
- The singleton handle installed by configure_opentelemetry()
- Shutdown coordination
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics, propagate, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from uptrace_otel._internal.logging import log_internal_error

if TYPE_CHECKING:
    from uptrace_otel.dsn import Dsn
    from uptrace_otel.sdk.pipeline import Flushable

logger = logging.getLogger(__name__)


class Uptrace:
    """Handle for a configured telemetry pipeline.

    An inactive handle (telemetry disabled) owns nothing and every method
    is a no-op. An active handle shuts its providers down exactly once,
    either through :meth:`shutdown` or on leaving a ``with`` block.
    """

    def __init__(
        self,
        *,
        dsn: Dsn | None = None,
        tracer_provider: Flushable | None = None,
        meter_provider: Flushable | None = None,
        logger_provider: Flushable | None = None,
    ) -> None:
        self.dsn = dsn
        self.tracer_provider = tracer_provider
        self.meter_provider = meter_provider
        self.logger_provider = logger_provider
        self.active = dsn is not None
        self._registered = False

    @classmethod
    def noop(cls) -> Uptrace:
        """Return an inactive handle."""
        return cls()

    def __repr__(self) -> str:
        return f"Uptrace(active={self.active}, dsn={self.dsn!r})"

    def __enter__(self) -> Uptrace:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()

    def _providers(self) -> list[tuple[str, Flushable]]:
        providers = [
            ("TracerProvider", self.tracer_provider),
            ("MeterProvider", self.meter_provider),
            ("LoggerProvider", self.logger_provider),
        ]
        return [(name, p) for name, p in providers if p is not None]

    def set_global(self) -> None:
        """Install the providers as the OpenTelemetry global providers.

        Also installs the W3C trace-context and baggage propagators. Calling
        it again, or on an inactive handle, does nothing.
        """
        if not self.active or self._registered:
            return
        self._registered = True

        propagate.set_global_textmap(
            CompositePropagator(
                [TraceContextTextMapPropagator(), W3CBaggagePropagator()]
            )
        )
        if self.tracer_provider is not None:
            trace.set_tracer_provider(self.tracer_provider)  # type: ignore[arg-type]
        if self.meter_provider is not None:
            metrics.set_meter_provider(self.meter_provider)  # type: ignore[arg-type]
        if self.logger_provider is not None:
            set_logger_provider(self.logger_provider)  # type: ignore[arg-type]
        logger.debug("Global OpenTelemetry providers installed")

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Flush pending telemetry from every provider.

        Returns:
            True if every provider flushed successfully.
        """
        if not self.active:
            return True
        ok = True
        for name, provider in self._providers():
            try:
                ok = bool(provider.force_flush(timeout_millis=timeout_millis)) and ok
            except Exception as e:
                log_internal_error(f"{name}.force_flush", e)
                ok = False
        return ok

    def shutdown(self) -> None:
        """Flush and shut down every provider.

        Runs at most once; later calls and calls on an inactive handle do
        nothing. A provider failing to shut down does not stop the others.
        """
        if not self.active:
            return
        self.active = False

        for name, provider in self._providers():
            try:
                provider.shutdown()
                logger.debug("%s shutdown complete", name)
            except Exception as e:
                log_internal_error(f"{name}.shutdown", e)


_configured: bool = False
_handle: Uptrace | None = None


def set_configured(handle: Uptrace) -> None:
    """Mark the SDK as configured with the given handle.

    A previously installed handle is shut down first so its providers do
    not keep exporting.

    Args:
        handle: The handle installed by configure_opentelemetry().
    """
    global _configured, _handle
    if _configured:
        logger.warning(
            "SDK already configured. Call shutdown() before re-configuring."
        )
    previous = _handle
    if previous is not None and previous is not handle:
        previous.shutdown()
    _configured = True
    _handle = handle


def is_configured() -> bool:
    """Check if configure_opentelemetry() has installed an active handle.

    Returns:
        True if an active handle is installed.
    """
    return _configured


def get_handle() -> Uptrace | None:
    """Get the installed handle.

    Returns:
        The handle if configured, None otherwise.
    """
    return _handle


def force_flush(timeout_millis: int = 30000) -> bool:
    """Flush the installed handle. Returns True when nothing is installed."""
    if _handle is None:
        return True
    return _handle.force_flush(timeout_millis=timeout_millis)


def shutdown() -> None:
    """Shutdown the installed handle and flush pending telemetry.

    This function is idempotent and safe to call multiple times.
    After shutdown, is_configured() returns False.
    """
    global _configured, _handle
    if _handle is not None:
        _handle.shutdown()
    _configured = False
    _handle = None
