"""
Monitoring & Observability Middleware
Request metrics, structured request logging, health and Prometheus output.
"""

import time
import uuid
from typing import TYPE_CHECKING, Any, Callable, Dict

import structlog
from fastapi import Request, Response
from prometheus_client import Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

if TYPE_CHECKING:
    from event_registration.core.database_manager import DatabaseManager
    from event_registration.core.settings import Settings

struct_logger = structlog.get_logger("event_registration.requests")


class PrometheusMetrics:
    """HTTP metrics collection"""

    def __init__(self) -> None:
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
        )

        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "HTTP request latency",
            ["method", "endpoint"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
        )

        self.active_requests = Gauge("active_requests", "Number of in-flight requests")

        self.errors_total = Counter(
            "errors_total", "Total application errors", ["error_type", "endpoint"]
        )

    def record_request(
        self, method: str, endpoint: str, status_code: int, duration: float
    ) -> None:
        """Record HTTP request metrics"""
        self.http_requests_total.labels(
            method=method, endpoint=endpoint, status_code=status_code
        ).inc()
        self.http_request_duration_seconds.labels(
            method=method, endpoint=endpoint
        ).observe(duration)

    def record_error(self, error_type: str, endpoint: str) -> None:
        """Record application error"""
        self.errors_total.labels(error_type=error_type, endpoint=endpoint).inc()


class BusinessMetrics:
    """Registration outcome counters"""

    def __init__(self) -> None:
        self.registrations_total = Counter(
            "registrations_total", "Registration attempts by outcome", ["outcome"]
        )
        self.registration_cancellations_total = Counter(
            "registration_cancellations_total", "Cancelled registrations"
        )

    def record_admission(self, outcome: Any) -> None:
        label = getattr(outcome, "value", outcome)
        if label == "cancelled":
            label = "cancelled_event"
        self.registrations_total.labels(outcome=label).inc()

    def record_cancellation(self) -> None:
        self.registration_cancellations_total.inc()


http_metrics = PrometheusMetrics()
business_metrics = BusinessMetrics()


def _endpoint_label(request: Request) -> str:
    """Route template when matched, so path ids do not explode label sets"""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return str(path) if path else "unmatched"


class MonitoringMiddleware(BaseHTTPMiddleware):
    """
    Monitoring middleware providing:
    - Request ids and response timing headers
    - Prometheus request metrics
    - Structured request logging
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self.metrics = http_metrics

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        struct_logger.info(
            "request_started",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else "unknown",
        )

        start_time = time.time()
        self.metrics.active_requests.inc()
        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            self.metrics.record_error(e.__class__.__name__, _endpoint_label(request))
            struct_logger.error(
                "request_failed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                duration=duration,
                error_type=e.__class__.__name__,
                exc_info=True,
            )
            raise
        finally:
            self.metrics.active_requests.dec()

        duration = time.time() - start_time
        self.metrics.record_request(
            request.method, _endpoint_label(request), response.status_code, duration
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        struct_logger.info(
            "request_completed",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=duration,
        )
        return response


async def get_health_status(
    manager: "DatabaseManager", settings: "Settings"
) -> Dict[str, Any]:
    """Health of the service and its database"""
    db_health = await manager.health_check()
    healthy = db_health.get("status") == "healthy"

    return {
        "status": "healthy" if healthy else "degraded",
        "system": {
            "timestamp": time.time(),
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
        },
        "database": db_health,
        "checks": {"database": healthy},
    }


async def get_prometheus_metrics() -> str:
    """Get Prometheus metrics"""
    return str(generate_latest().decode("utf-8"))
