"""
Prometheus metrics for the booking engine.

Service timings come from the @measure_operation decorator; booking outcome
counters are recorded by the reservation and lifecycle services.
"""

from typing import Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

# Custom registry to avoid conflicts with default process metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "bookings_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "bookings_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "bookings_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

reservations_total = Counter(
    "bookings_reservations_total",
    "Reservation attempts by outcome",
    ["outcome"],  # created | conflict
    registry=REGISTRY,
)

status_transitions_total = Counter(
    "bookings_status_transitions_total",
    "Booking status transitions by target status and outcome",
    ["to_status", "outcome"],  # outcome: applied | rejected
    registry=REGISTRY,
)

outbox_events_total = Counter(
    "bookings_outbox_events_total",
    "Outbox events by delivery result",
    ["event_type", "status"],  # sent | retry | failed
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade over the module-level collectors."""

    CONTENT_TYPE = CONTENT_TYPE_LATEST

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'ReservationService')
            operation: Operation/method name (e.g., 'reserve')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_reservation(outcome: str) -> None:
        reservations_total.labels(outcome=outcome).inc()

    @staticmethod
    def record_transition(to_status: str, outcome: str) -> None:
        status_transitions_total.labels(to_status=to_status, outcome=outcome).inc()

    @staticmethod
    def record_outbox_event(event_type: str, status: str) -> None:
        outbox_events_total.labels(event_type=event_type, status=status).inc()

    @staticmethod
    def get_metrics() -> bytes:
        """Generate Prometheus metrics in exposition format."""
        return generate_latest(REGISTRY)


prometheus_metrics = PrometheusMetrics()
