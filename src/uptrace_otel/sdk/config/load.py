"""Configuration loading, parsing, and validation for the uptrace_otel SDK."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from uptrace_otel.api.types import (
    BatchConfig,
    LogsConfig,
    MetricsConfig,
    MetricsSectionConfig,
    ServiceConfig,
    TracingConfig,
    UptraceConfig,
)
from uptrace_otel.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Pattern for environment variable substitution: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

KNOWN_SECTIONS = {"dsn", "service", "resource_attributes", "tracing", "metrics", "logs"}


def _substitute_env_vars(value: str) -> str:
    """Substitute ${VAR_NAME} patterns with environment variable values.

    Missing variables are replaced with an empty string.
    """

    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            logger.warning(
                "Environment variable '%s' not set, using empty string", var_name
            )
            return ""
        return env_value

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _substitute_env_vars_recursive(data: Any) -> Any:
    """Recursively substitute environment variables in a data structure."""
    if isinstance(data, dict):
        return {k: _substitute_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return _substitute_env_vars(data)
    else:
        return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{name}' must be a mapping")
    return value


def _optional_int(data: dict[str, Any], key: str, section: str) -> int | None:
    value = data.get(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"{section}.{key} must be an integer, got {value!r}"
        ) from None


_TRUE_STRINGS = {"true", "1", "yes"}
_FALSE_STRINGS = {"false", "0", "no"}


def _optional_bool(
    data: dict[str, Any], key: str, section: str, default: bool
) -> bool:
    value = data.get(key)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ConfigurationError(f"{section}.{key} must be a boolean, got {value!r}")


def _optional_float(data: dict[str, Any], key: str, section: str) -> float | None:
    value = data.get(key)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"{section}.{key} must be a number, got {value!r}"
        ) from None


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _parse_service_config(data: dict[str, Any]) -> ServiceConfig:
    """Parse service configuration section."""
    return ServiceConfig(
        name=_optional_str(data.get("name")),
        version=_optional_str(data.get("version")),
        deployment_environment=_optional_str(data.get("deployment_environment")),
    )


def _parse_batch_config(data: dict[str, Any]) -> BatchConfig:
    """Parse tracing.batch configuration section."""
    return BatchConfig(
        max_queue_size=_optional_int(data, "max_queue_size", "tracing.batch"),
        max_export_batch_size=_optional_int(
            data, "max_export_batch_size", "tracing.batch"
        ),
        scheduled_delay_millis=_optional_int(
            data, "scheduled_delay_millis", "tracing.batch"
        ),
        export_timeout_millis=_optional_int(
            data, "export_timeout_millis", "tracing.batch"
        ),
    )


def _parse_tracing_config(data: dict[str, Any]) -> TracingConfig:
    """Parse tracing configuration section."""
    return TracingConfig(
        enabled=_optional_bool(data, "enabled", "tracing", True),
        timeout=_optional_float(data, "timeout", "tracing"),
        pretty_print=_optional_bool(data, "pretty_print", "tracing", False),
        batch=_parse_batch_config(_section(data, "batch")),
    )


def _parse_metrics_config(data: dict[str, Any]) -> MetricsSectionConfig:
    """Parse metrics configuration section."""
    return MetricsSectionConfig(
        enabled=_optional_bool(data, "enabled", "metrics", True),
        reader=MetricsConfig(
            export_interval_millis=_optional_int(
                data, "export_interval_millis", "metrics"
            ),
            export_timeout_millis=_optional_int(
                data, "export_timeout_millis", "metrics"
            ),
        ),
    )


def _parse_logs_config(data: dict[str, Any]) -> LogsConfig:
    """Parse logs configuration section."""
    return LogsConfig(enabled=_optional_bool(data, "enabled", "logs", False))


def parse_config(data: dict[str, Any]) -> UptraceConfig:
    """Build an UptraceConfig from already loaded data.

    Args:
        data: Mapping with the configuration file layout.

    Returns:
        Parsed UptraceConfig.

    Raises:
        ConfigurationError: If a section has the wrong type.
    """
    unknown = sorted(set(data) - KNOWN_SECTIONS)
    if unknown:
        logger.warning("Unknown configuration keys ignored: %s", unknown)

    return UptraceConfig(
        dsn=_optional_str(data.get("dsn")),
        service=_parse_service_config(_section(data, "service")),
        resource_attributes=dict(_section(data, "resource_attributes")),
        tracing=_parse_tracing_config(_section(data, "tracing")),
        metrics=_parse_metrics_config(_section(data, "metrics")),
        logs=_parse_logs_config(_section(data, "logs")),
    )


def load_config(path: str | Path) -> UptraceConfig:
    """Load and parse configuration from a YAML file.

    String values may reference environment variables as ``${VAR_NAME}``.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Parsed UptraceConfig.

    Raises:
        ConfigurationError: If the file doesn't exist, the YAML is invalid,
                           or a section has the wrong type.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path) as f:
            raw_data = yaml.safe_load(f)
            if raw_data is None:
                raw_data = {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if not isinstance(raw_data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping: {path}"
        )

    data = _substitute_env_vars_recursive(raw_data)
    return parse_config(data)
