"""
Middleware package for FastAPI application.

Contains:
- MetricsMiddleware: Request tracking and Prometheus metrics
"""

from offload_monitor.middleware.metrics import (
    MetricsMiddleware,
    get_metrics_text,
    get_metrics_content_type,
    record_probe_duration,
    record_accelerator_detection
)

__all__ = [
    "MetricsMiddleware",
    "get_metrics_text",
    "get_metrics_content_type",
    "record_probe_duration",
    "record_accelerator_detection"
]
