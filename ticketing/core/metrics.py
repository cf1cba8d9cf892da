"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_creations = Counter(
    'booking_creations_total',
    'Total booking creation attempts',
    ['status']  # success, conflict, capacity_exhausted, error
)

booking_creation_latency = Histogram(
    'booking_creation_latency_seconds',
    'Booking creation latency, ticket number allocation included',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

ticket_number_collisions = Counter(
    'ticket_number_collisions_total',
    'Ticket number collisions observed',
    ['stage']  # generate, insert
)

status_transitions = Counter(
    'booking_status_transitions_total',
    'Booking status updates',
    ['status']
)

# Verification metrics
ticket_verifications = Counter(
    'ticket_verifications_total',
    'Ticket verification lookups',
    ['result']  # valid, invalid
)

# Credential metrics
credential_deliveries = Counter(
    'credential_deliveries_total',
    'Ticket credential deliveries',
    ['result']  # sent, failed
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# Convenience functions for instrumentation
def record_booking_creation(status: str):
    """Record booking creation. Status: success, conflict, capacity_exhausted, error"""
    booking_creations.labels(status=status).inc()


def record_collision(stage: str):
    """Record a ticket number collision. Stage: generate, insert"""
    ticket_number_collisions.labels(stage=stage).inc()


def record_verification(valid: bool):
    result = "valid" if valid else "invalid"
    ticket_verifications.labels(result=result).inc()


def record_delivery(sent: bool):
    result = "sent" if sent else "failed"
    credential_deliveries.labels(result=result).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
