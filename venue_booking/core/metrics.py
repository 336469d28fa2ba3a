"""
Metrics instrumentation for observability.
Prometheus-compatible counters for the booking pipeline. The host process
decides how to expose them; metrics_payload() renders the scrape body.
"""

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking attempts',
    ['status']  # success, not_found, rejected, payment_failed, persist_failed, conflict
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'End-to-end booking orchestration latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Payment metrics
payment_requests = Counter(
    'payment_requests_total',
    'Payment gateway requests',
    ['result']  # approved, declined
)

# Concurrency metrics
reservation_conflicts = Counter(
    'reservation_conflicts_total',
    'Event updates rejected by the optimistic version check'
)


def metrics_payload() -> tuple[bytes, str]:
    """
    Render the current registry.

    Usage:
        body, content_type = metrics_payload()
    """
    return generate_latest(), CONTENT_TYPE_LATEST


# Convenience functions for instrumentation
def record_booking_attempt(status: str):
    """Record booking attempt outcome."""
    booking_attempts.labels(status=status).inc()


def record_payment(approved: bool):
    """Record payment gateway decision."""
    result = "approved" if approved else "declined"
    payment_requests.labels(result=result).inc()


def record_conflict():
    """Record a lost optimistic-concurrency race."""
    reservation_conflicts.inc()
