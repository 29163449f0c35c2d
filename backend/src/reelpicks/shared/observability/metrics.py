"""Prometheus metrics for the recommendation router."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


# ── HTTP metrics ─────────────────────────────────────────────
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ── Dispatch metrics ─────────────────────────────────────────
DISPATCH_ATTEMPTS = Counter(
    "model_dispatch_attempts_total",
    "Backend invocations by outcome",
    ["backend", "outcome"],
)

DISPATCH_LATENCY = Histogram(
    "model_dispatch_latency_seconds",
    "Backend response latency",
    ["backend"],
    buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0),
)

DISPATCH_FAILURES = Counter(
    "model_dispatch_failures_total",
    "Requests that ended without usable text",
    ["kind"],
)

# ── Response recovery ────────────────────────────────────────
RESPONSE_RECOVERY = Counter(
    "response_recovery_total",
    "How backend text was turned into recommendations",
    ["result"],  # strict / salvaged / failed
)

RECORDS_DROPPED = Counter(
    "recommendation_records_dropped_total",
    "Recommendation records dropped by validation",
)
