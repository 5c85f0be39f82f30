"""DSN parsing and Uptrace endpoint resolution.

A DSN packs the ingestion endpoint, the project token and the project id
into a single URI::

    https://<token>@uptrace.dev/<project_id>
    http://project2_secret_token@localhost:14317/2
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlsplit

from uptrace_otel.exceptions import EmptyConnectionString, InvalidConnectionString

# Uptrace Cloud
UPTRACE_HOST = "uptrace.dev"
UPTRACE_API_HOST = "api.uptrace.dev"
UPTRACE_OTLP_HOST = "otlp.uptrace.dev:4317"
UPTRACE_OTLP_GRPC_ADDR = "https://otlp.uptrace.dev:4317"
UPTRACE_APP_ADDR = "https://app.uptrace.dev"

# Self-hosted Uptrace serves the UI on this port
APP_PORT = 14318

# Values shipped in example configs; a DSN using them disables telemetry
PLACEHOLDER_PROJECT_ID = "<project_id>"
PLACEHOLDER_TOKEN = "<token>"


@dataclass(frozen=True)
class Dsn:
    """Parsed and validated Uptrace DSN.

    Instances are only created through :meth:`parse`, so ``scheme``,
    ``host``, ``token`` and ``project_id`` are always non-empty.
    """

    original: str = field(repr=False)
    scheme: str
    host: str
    port: int | None
    project_id: str
    token: str = field(repr=False)

    @classmethod
    def parse(cls, raw: str) -> Dsn:
        """Parse a DSN string.

        Args:
            raw: DSN in the form ``scheme://token@host[:port]/project_id``.

        Returns:
            The parsed Dsn.

        Raises:
            EmptyConnectionString: If raw is empty.
            InvalidConnectionString: If raw is not a URI or misses the
                scheme, host, project id or token.
        """
        if not raw:
            raise EmptyConnectionString()

        try:
            url = urlsplit(raw)
            port = url.port
        except ValueError as e:
            raise InvalidConnectionString(raw, str(e)) from e

        if not url.scheme:
            raise InvalidConnectionString(raw, "scheme is missing")

        host = url.hostname
        if not host:
            raise InvalidConnectionString(raw, "host is missing")
        if ":" in host:
            # IPv6 literal, keep it usable in host:port form
            host = f"[{host}]"
        elif host == UPTRACE_API_HOST:
            host = UPTRACE_HOST

        segments = [segment for segment in url.path.split("/") if segment]
        if not segments:
            raise InvalidConnectionString(raw, "project id is missing")

        if not url.username:
            raise InvalidConnectionString(raw, "token is missing")

        return cls(
            original=raw,
            scheme=url.scheme,
            host=host,
            port=port,
            project_id=segments[0],
            token=url.username,
        )

    def __str__(self) -> str:
        return self.original

    @property
    def is_cloud(self) -> bool:
        """True when the DSN points at Uptrace Cloud."""
        return self.host == UPTRACE_HOST

    def otlp_host(self) -> str:
        """Return the OTLP ``host:port`` address."""
        if self.is_cloud:
            return UPTRACE_OTLP_HOST
        if self.port is not None:
            return f"{self.host}:{self.port}"
        return self.host

    def otlp_grpc_addr(self) -> str:
        """Return the OTLP/gRPC endpoint URL."""
        if self.is_cloud:
            return UPTRACE_OTLP_GRPC_ADDR
        if self.port is not None:
            return f"{self.scheme}://{self.host}:{self.port}"
        return f"{self.scheme}://{self.host}"

    def app_addr(self) -> str:
        """Return the Uptrace UI URL."""
        if self.is_cloud:
            return UPTRACE_APP_ADDR
        return f"{self.scheme}://{self.host}:{APP_PORT}"

    def is_disabled(self) -> bool:
        """True when the DSN still carries placeholder credentials."""
        return (
            self.project_id == PLACEHOLDER_PROJECT_ID
            or self.token == PLACEHOLDER_TOKEN
        )


def parse_dsn(raw: str) -> Dsn:
    """Parse a DSN string. See :meth:`Dsn.parse`."""
    return Dsn.parse(raw)
