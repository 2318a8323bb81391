"""Prometheus metrics helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REMOTE_REQUESTS_TOTAL = Counter(
    "inspectsync_remote_requests_total",
    "Total number of requests made to the inspection server.",
    ["endpoint", "outcome"],
)

REMOTE_REQUEST_DURATION_SECONDS = Histogram(
    "inspectsync_remote_request_duration_seconds",
    "Inspection server request duration in seconds.",
    ["endpoint"],
    buckets=(
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
        30.0,
    ),
)

STORE_MUTATIONS_TOTAL = Counter(
    "inspectsync_store_mutations_total",
    "Total number of result mutations applied to the inspection store.",
    ["kind"],
)


def observe_remote_request(
    *,
    endpoint: str,
    outcome: str,
    duration_ms: float,
) -> None:
    REMOTE_REQUESTS_TOTAL.labels(endpoint=endpoint, outcome=outcome).inc()
    REMOTE_REQUEST_DURATION_SECONDS.labels(endpoint=endpoint).observe(
        duration_ms / 1000.0
    )


def observe_store_mutation(kind: str) -> None:
    STORE_MUTATIONS_TOTAL.labels(kind=kind).inc()
