"""Prometheus metrics for payment events, score movement and collaborator failures"""

from typing import Optional

from prometheus_client import Counter, Histogram

# Payment metrics
payment_event_counter = Counter(
    "credimanager_payment_events_total",
    "Payment mutations reconciled",
    ["event"],  # added | edited | deleted
)

score_adjustment_counter = Counter(
    "credimanager_score_adjustments_total",
    "Score deltas applied to borrowers",
    ["delta"],  # -2 .. +2
)

# Collaborator metrics
advisory_failure_counter = Counter(
    "credimanager_advisory_failures_total",
    "Failed risk advisory lookups",
)

snapshot_fallback_counter = Counter(
    "credimanager_snapshot_fallbacks_total",
    "Saved snapshots that could not be loaded and were replaced by the seed dataset",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment_event(event: str, score_delta: Optional[int]) -> None:
    """Count a reconciled payment mutation and the score delta it applied"""
    payment_event_counter.labels(event=event).inc()
    if score_delta is not None:
        score_adjustment_counter.labels(delta=f"{score_delta:+d}").inc()
