"""
Prometheus metrics for monitoring application performance.

Metrics exported:
- teacha_requests_total: Total HTTP requests
- teacha_request_duration_seconds: Request duration histogram
- teacha_errors_total: Total unhandled errors
- teacha_tenant_signups_total: Tenant signups by plan
- teacha_user_registrations_total: User accounts created by role
- teacha_enrollments_total: Course enrollments
"""

import re
import time
import logging
from typing import Optional

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
)
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

_UUID_RE = re.compile(r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', re.IGNORECASE)
_NUMERIC_ID_RE = re.compile(r'/\d+(?=/|$)')


class PrometheusMetrics:
    """
    Prometheus metrics collector for Teacha.

    Tracks HTTP request rate, duration and status codes alongside the
    business events of the platform (signups, registrations, enrollments).
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize Prometheus metrics.

        Args:
            registry: Prometheus registry (optional, uses default if not provided)
        """
        kwargs = {"registry": registry} if registry is not None else {}
        self.registry = registry

        # HTTP request metrics
        self.requests_total = Counter(
            "teacha_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            **kwargs,
        )

        self.request_duration = Histogram(
            "teacha_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
            **kwargs,
        )

        # Error metrics
        self.errors_total = Counter(
            "teacha_errors_total",
            "Total errors",
            ["error_type", "endpoint"],
            **kwargs,
        )

        # Business metrics
        self.tenant_signups = Counter(
            "teacha_tenant_signups_total",
            "Tenant signups",
            ["plan"],
            **kwargs,
        )

        self.user_registrations = Counter(
            "teacha_user_registrations_total",
            "User accounts created",
            ["role"],
            **kwargs,
        )

        self.enrollments = Counter(
            "teacha_enrollments_total",
            "Course enrollments",
            **kwargs,
        )

        logger.info("Prometheus metrics initialized")

    def track_request(
        self,
        method: str,
        endpoint: str,
        status_code: int,
        duration: float,
    ):
        """
        Track HTTP request metrics.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Normalized request path
            status_code: HTTP status code
            duration: Request duration in seconds
        """
        self.requests_total.labels(
            method=method,
            endpoint=endpoint,
            status_code=status_code,
        ).inc()

        self.request_duration.labels(
            method=method,
            endpoint=endpoint,
        ).observe(duration)

    def track_error(self, error_type: str, endpoint: str):
        self.errors_total.labels(error_type=error_type, endpoint=endpoint).inc()

    def track_signup(self, plan: str):
        self.tenant_signups.labels(plan=plan).inc()

    def track_registration(self, role: str):
        self.user_registrations.labels(role=role).inc()

    def track_enrollment(self):
        self.enrollments.inc()


# Global metrics instance
_metrics: Optional[PrometheusMetrics] = None


def get_metrics() -> PrometheusMetrics:
    """
    Get global metrics instance.

    Returns:
        PrometheusMetrics instance
    """
    global _metrics
    if _metrics is None:
        _metrics = PrometheusMetrics()
    return _metrics


def normalize_endpoint(path: str) -> str:
    """
    Normalize endpoint path for metrics labels.

    Replaces UUIDs and numeric IDs with placeholders to prevent high cardinality.
    """
    path = _UUID_RE.sub('{uuid}', path)
    return _NUMERIC_ID_RE.sub('/{id}', path)


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for automatic request metrics collection.
    """

    def __init__(self, app):
        super().__init__(app)
        self.metrics = get_metrics()

    async def dispatch(self, request: Request, call_next):
        # Skip metrics endpoint itself
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.time()
        endpoint = normalize_endpoint(request.url.path)
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            self.metrics.track_error(type(e).__name__, endpoint)
            # Re-raise to let error handler deal with it
            raise
        finally:
            self.metrics.track_request(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
                duration=time.time() - start_time,
            )

        return response


async def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint handler.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
