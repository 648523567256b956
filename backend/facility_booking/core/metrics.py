"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at the /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_requests = Counter(
    'booking_requests_total',
    'Booking creation attempts',
    ['result']  # created, conflict, error
)

booking_transitions = Counter(
    'booking_transitions_total',
    'State machine transitions attempted',
    ['machine', 'event', 'result']  # machine: approval/cancellation; result: applied/forbidden/conflict
)

# Auth metrics
login_attempts = Counter(
    'login_attempts_total',
    'Login attempts',
    ['result']  # success, failure
)

request_latency = Histogram(
    'request_latency_seconds',
    'HTTP request latency',
    ['method'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set/delete; hit/miss/ok/error
)


def metrics_endpoint() -> Response:
    """Prometheus scrape endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_request(result: str):
    """Result: created, conflict, error"""
    booking_requests.labels(result=result).inc()


def record_transition(machine: str, event: str, result: str):
    booking_transitions.labels(machine=machine, event=event, result=result).inc()


def record_login(success: bool):
    login_attempts.labels(result="success" if success else "failure").inc()


def record_cache_operation(operation: str, result: str):
    """Operation: get, set, delete. Result: hit, miss, ok, error"""
    cache_operations.labels(operation=operation, result=result).inc()
