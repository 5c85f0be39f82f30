"""
Metrics example - a histogram recorded every 100ms, configured from YAML.

Run:
    export UPTRACE_DSN="https://<token>@uptrace.dev/<project_id>"
    python examples/metrics/main.py

Stop with Ctrl+C, pending metrics are flushed on exit.
"""

from __future__ import annotations

import time
from pathlib import Path

from opentelemetry import metrics

import uptrace_otel


def main() -> None:
    config_path = Path(__file__).parent / "uptrace.yaml"

    with uptrace_otel.configure_opentelemetry(config_path=config_path):
        meter = metrics.get_meter("app_or_package_name")
        histogram = meter.create_histogram("ex.com.three")

        try:
            while True:
                histogram.record(1.3)
                time.sleep(0.1)
        except KeyboardInterrupt:
            pass


if __name__ == "__main__":
    main()
