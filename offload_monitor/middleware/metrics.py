"""
API Metrics Middleware - Request and probe tracking for Prometheus.

This module provides middleware for collecting API server metrics:
- Request count per endpoint
- Request duration histogram
- Error rates
- Probe durations and accelerator detection outcomes
"""

import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST, CollectorRegistry


# ============================================================================
# Prometheus Metrics Registry
# ============================================================================

# Separate registry so only this service's metrics are exported
metrics_registry = CollectorRegistry()

api_requests_total = Counter(
    'api_requests_total',
    'Total number of API requests',
    ['method', 'endpoint', 'status_code'],
    registry=metrics_registry
)

api_request_duration_seconds = Histogram(
    'api_request_duration_seconds',
    'API request duration in seconds',
    ['method', 'endpoint'],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=metrics_registry
)

api_errors_total = Counter(
    'api_errors_total',
    'Total number of API errors',
    ['method', 'endpoint', 'error_type'],
    registry=metrics_registry
)

probe_duration_seconds = Histogram(
    'probe_duration_seconds',
    'Probe duration in seconds',
    ['probe'],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
    registry=metrics_registry
)

accelerator_detections_total = Counter(
    'accelerator_detections_total',
    'Accelerator probe results by detection method',
    ['method'],
    registry=metrics_registry
)

KNOWN_ENDPOINTS = frozenset({"/", "/health", "/api/status", "/gpu", "/version"})


# ============================================================================
# Metrics Middleware
# ============================================================================

class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware for collecting API request metrics.

    Tracks:
    - Request count
    - Request duration
    - Error rates
    - HTTP status codes
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics."""
        # Skip metrics collection for the metrics endpoint itself
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.time()
        endpoint = self._normalize_endpoint(request.url.path)
        method = request.method

        try:
            response = await call_next(request)
            status_code = response.status_code

            api_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status_code=status_code
            ).inc()

            duration = time.time() - start_time
            api_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

            # Track errors (4xx, 5xx)
            if status_code >= 400:
                error_type = "client_error" if status_code < 500 else "server_error"
                api_errors_total.labels(
                    method=method,
                    endpoint=endpoint,
                    error_type=error_type
                ).inc()

            return response

        except Exception as exc:
            duration = time.time() - start_time
            api_errors_total.labels(
                method=method,
                endpoint=endpoint,
                error_type=exc.__class__.__name__
            ).inc()

            api_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

            raise exc

    def _normalize_endpoint(self, path: str) -> str:
        """
        Normalize endpoint path for metrics aggregation.

        - /static/app.js -> /static/{path}
        - /no/such/route -> {unmatched}
        """
        if path != "/":
            path = path.rstrip("/")
        if path in KNOWN_ENDPOINTS:
            return path
        if path.startswith("/static/"):
            return "/static/{path}"
        return "{unmatched}"


# ============================================================================
# Metrics Export Functions
# ============================================================================

def get_metrics_text() -> bytes:
    """
    Generate Prometheus text format metrics.

    Returns:
        bytes: Prometheus-formatted metrics
    """
    return generate_latest(metrics_registry)


def get_metrics_content_type() -> str:
    """
    Get the content type for Prometheus metrics.

    Returns:
        str: Content-Type header value
    """
    return CONTENT_TYPE_LATEST


# ============================================================================
# Helper Functions for Manual Metric Recording
# ============================================================================

def record_probe_duration(probe: str, duration: float):
    """Record how long a probe took."""
    probe_duration_seconds.labels(probe=probe).observe(duration)


def record_accelerator_detection(method: str):
    """Record the detection method an accelerator probe resolved to."""
    accelerator_detections_total.labels(method=method).inc()
