"""Exception classes for the uptrace_otel SDK."""

from __future__ import annotations


class UptraceError(Exception):
    """Base class for every error raised by the SDK."""


class ConfigurationError(UptraceError):
    """Raised when SDK configuration is invalid or incomplete.

    Disabling telemetry (UPTRACE_DISABLED, both pipelines turned off or a
    placeholder DSN) is never reported through this exception; those cases
    produce an inactive handle instead.
    """


class EmptyConnectionString(ConfigurationError):
    """Raised when an empty DSN is parsed."""

    def __init__(self) -> None:
        super().__init__("DSN is empty (use with_dsn() or the UPTRACE_DSN env var)")


class InvalidConnectionString(ConfigurationError):
    """Raised when a DSN cannot be parsed or misses a required component."""

    def __init__(self, raw: str, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"invalid DSN {raw!r}: {reason}")


class MissingConnectionString(ConfigurationError):
    """Raised when no DSN was configured explicitly or through UPTRACE_DSN."""

    def __init__(self) -> None:
        super().__init__(
            "DSN is not configured. Pass dsn=... or set the UPTRACE_DSN "
            "environment variable."
        )


class BuilderConsumedError(ConfigurationError):
    """Raised when build() is called on a builder that was already built."""


class PipelineBuildError(UptraceError):
    """Raised when the export transport fails to construct a pipeline.

    The underlying transport error is available as ``__cause__``.
    """


class TraceBuildError(PipelineBuildError):
    """Raised when the trace pipeline cannot be constructed."""


class MetricsBuildError(PipelineBuildError):
    """Raised when the metrics pipeline cannot be constructed."""


class LogsBuildError(PipelineBuildError):
    """Raised when the logs pipeline cannot be constructed."""
