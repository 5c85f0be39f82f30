"""Package logger and the log events shared across the SDK.

Nothing logged here may contain the DSN token or the raw DSN.
"""

import logging

logger = logging.getLogger("uptrace_otel")

# Quiet unless the application opts in
logger.setLevel(logging.WARNING)


def log_internal_error(operation: str, error: Exception) -> None:
    """Log a provider failure that is not raised to user code."""
    logger.warning(f"uptrace_otel: {operation} failed: {error}", exc_info=True)


def log_disabled(reason: str) -> None:
    """Log why build() returned an inactive handle."""
    logger.debug(f"uptrace_otel: telemetry disabled, {reason}")


def log_configured(app_addr: str) -> None:
    """Log where the exported telemetry can be viewed."""
    logger.info(f"Uptrace is configured, view your telemetry at {app_addr}")
