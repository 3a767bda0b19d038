"""
Prometheus metrics for the Maestro platform.

Three sources feed this registry:
- ``BaseService.measure_operation`` (per-operation latency and outcome)
- ``BaseService.record_transition`` (workflow state changes)
- ``PrometheusMiddleware`` (HTTP latency and status codes)

The registry is private to the app so test runs and multiple app instances in
one process do not collide with the default global registry.
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

HTTP_LABELS = ("method", "endpoint", "status_code")

http_request_duration_seconds = Histogram(
    "maestro_http_request_duration_seconds",
    "Time spent serving an HTTP request",
    HTTP_LABELS,
    registry=REGISTRY,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

http_requests_total = Counter(
    "maestro_http_requests_total",
    "HTTP requests served",
    HTTP_LABELS,
    registry=REGISTRY,
)

service_operation_duration_seconds = Histogram(
    "maestro_service_operation_duration_seconds",
    "Time spent in a workflow service operation",
    ("service", "operation"),
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "maestro_service_operations_total",
    "Workflow service operations by outcome",
    ("service", "operation", "status"),
    registry=REGISTRY,
)

errors_total = Counter(
    "maestro_service_errors_total",
    "Workflow service operations that raised, by exception type",
    ("service", "operation", "error_type"),
    registry=REGISTRY,
)

workflow_transitions_total = Counter(
    "maestro_workflow_transitions_total",
    "State transitions applied by the workflow services",
    ("entity", "to_status"),
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade so callers never touch metric objects directly."""

    @staticmethod
    def record_http_request(method: str, endpoint: str, duration: float, status_code: int) -> None:
        labeled = dict(method=method, endpoint=endpoint, status_code=str(status_code))
        http_request_duration_seconds.labels(**labeled).observe(duration)
        http_requests_total.labels(**labeled).inc()

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Args:
            service: service class name, e.g. ``MembershipService``
            operation: name given to ``measure_operation``
            duration: seconds
            status: ``success`` or ``error``
            error_type: exception class name when status is ``error``
        """
        service_operation_duration_seconds.labels(service, operation).observe(duration)
        service_operations_total.labels(service, operation, status).inc()
        if error_type:
            errors_total.labels(service, operation, error_type).inc()

    @staticmethod
    def record_transition(entity: str, to_status: str) -> None:
        workflow_transitions_total.labels(entity=entity, to_status=to_status).inc()

    @staticmethod
    def get_metrics() -> bytes:
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
