"""
Basic tracing example - nested spans exported to Uptrace.

Run:
    UPTRACE_DSN="https://<token>@uptrace.dev/<project_id>" python examples/basic/main.py

The trace URL is printed at the end, open it to see the spans.
"""

from __future__ import annotations

import time

from opentelemetry import trace

import uptrace_otel


def main() -> None:
    uptrace_otel.configure_opentelemetry(
        service_name="myservice",
        service_version="1.0.0",
        deployment_environment="testing",
        metrics_enabled=False,
    )

    tracer = trace.get_tracer("app_or_package_name")

    with tracer.start_as_current_span("root-span") as root:
        time.sleep(0.005)

        with tracer.start_as_current_span("GET /posts/:id") as span:
            time.sleep(0.01)
            span.set_attribute("http.method", "GET")
            span.set_attribute("http.route", "/posts/:id")
            span.set_attribute("http.url", "http://localhost:8080/posts/123")
            span.set_attribute("http.status_code", 200)

        with tracer.start_as_current_span("SELECT") as span:
            time.sleep(0.02)
            span.set_attribute("db.system", "mysql")
            span.set_attribute("db.statement", "SELECT * FROM table")

        print(uptrace_otel.trace_url(root))

    uptrace_otel.shutdown()


if __name__ == "__main__":
    main()
