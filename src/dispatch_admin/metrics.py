from __future__ import annotations

from prometheus_client import Counter, Histogram, start_http_server

operation_attempts_total = Counter(
    "admin_operation_attempts_total",
    "Remote call attempts made by admin operations",
    labelnames=["action"],
)

operation_retries_total = Counter(
    "admin_operation_retries_total",
    "Retries scheduled after a transient failure",
    labelnames=["action", "error_code"],
)

operation_failures_total = Counter(
    "admin_operation_failures_total",
    "Admin operations that settled on an error",
    labelnames=["action", "error_code"],
)

operation_latency_seconds = Histogram(
    "admin_operation_latency_seconds",
    "Admin operation latency including backoff waits (seconds)",
    buckets=[0.05, 0.1, 0.3, 0.5, 1, 2, 5, 10, 30, 60],
    labelnames=["action"],
)


def maybe_start_metrics(*, enable: bool, bind: str, port: int) -> None:
    if not enable:
        return
    start_http_server(port, addr=bind)
