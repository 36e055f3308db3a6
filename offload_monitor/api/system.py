"""
System API - Health, version and metrics endpoints.

None of these endpoints run the probes, so they keep answering when
detection is degraded.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
import platform

from offload_monitor import __version__
from offload_monitor.config import Settings
from offload_monitor.deps import get_process_clock, get_settings
from offload_monitor.models.status import HealthResponse
from offload_monitor.services.clock import ProcessClock
from offload_monitor.middleware import get_metrics_text, get_metrics_content_type

router = APIRouter()


# ============================================================================
# Health Check
# ============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_settings),
    clock: ProcessClock = Depends(get_process_clock),
):
    """
    Liveness check used by the container HEALTHCHECK.

    **Returns:** status, timestamp, process uptime and runtime mode.
    """
    return HealthResponse(
        status="healthy",
        uptime=clock.uptime_seconds(),
        environment=settings.APP_ENV,
        refresh_interval=settings.DASHBOARD_REFRESH_SECONDS,
    )


# ============================================================================
# Version
# ============================================================================

@router.get("/version")
async def get_version(clock: ProcessClock = Depends(get_process_clock)):
    """
    Get API version information.

    **Example Response:**
    ```json
    {
      "api_version": "1.0.0",
      "python_version": "3.12.1",
      "started_at": "2025-01-23T10:00:00+00:00"
    }
    ```
    """
    return {
        "api_version": __version__,
        "python_version": platform.python_version(),
        "started_at": clock.started_at.isoformat(),
    }


# ============================================================================
# Prometheus Metrics
# ============================================================================

@router.get("/metrics")
async def get_metrics():
    """Prometheus text exposition of the API and probe metrics."""
    return Response(content=get_metrics_text(), media_type=get_metrics_content_type())
