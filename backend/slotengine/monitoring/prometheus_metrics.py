"""
Prometheus metrics module for the scheduling backend.

Exposes service operation timings recorded by @measure_operation together
with a few scheduling-specific counters. A private registry keeps these
metrics isolated from the default process collectors.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "slotengine_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "slotengine_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "slotengine_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

booking_lock_total = Counter(
    "slotengine_booking_lock_total",
    "Advisory booking lock outcomes",
    ["action", "outcome"],
    registry=REGISTRY,
)

booking_admissions_total = Counter(
    "slotengine_booking_admissions_total",
    "Booking admission outcomes",
    ["outcome"],  # admitted | conflict | rejected | insert_conflict | lock_contended
    registry=REGISTRY,
)

slots_generated = Histogram(
    "slotengine_slots_generated",
    "Number of bookable slots returned per availability query",
    registry=REGISTRY,
    buckets=(0, 1, 2, 4, 8, 16, 32, 64, 128),
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

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
            service: Service name (e.g., 'BookingService')
            operation: Operation/method name (e.g., 'create_booking')
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
    def record_booking_lock(action: str, outcome: str) -> None:
        booking_lock_total.labels(action=action, outcome=outcome).inc()

    @staticmethod
    def record_booking_admission(outcome: str) -> None:
        booking_admissions_total.labels(outcome=outcome).inc()

    @staticmethod
    def record_slots_generated(count: int) -> None:
        slots_generated.observe(count)

    @staticmethod
    def get_metrics() -> bytes:
        """Render the registry in Prometheus text exposition format."""
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
