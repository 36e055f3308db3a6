"""
Status API - Accelerator, offload and host status endpoints.

Probe failures never surface as HTTP errors here: they are reported inside
the payload through the detection method and degraded fields.
"""

from fastapi import APIRouter, Depends

from offload_monitor.deps import get_aggregator
from offload_monitor.models.status import AcceleratorInfo, StatusResponse
from offload_monitor.services.aggregator import StatusAggregator

router = APIRouter()


# The endpoints are sync so FastAPI runs the GPU query subprocess in its threadpool

@router.get("/api/status", response_model=StatusResponse)
def get_status(aggregator: StatusAggregator = Depends(get_aggregator)):
    """
    Returns a fresh snapshot of accelerator, offload and system state.

    **Returns:** accelerator info, offload status, system metrics and generation time.
    """
    return aggregator.snapshot()


@router.get("/gpu", response_model=AcceleratorInfo)
def get_gpu(aggregator: StatusAggregator = Depends(get_aggregator)):
    """
    Returns the accelerator probe result only.

    **Example Response:**
    ```json
    {
      "detected": true,
      "method": "nvidia-smi",
      "details": "Full GPU access available",
      "name": "Tesla T4",
      "memoryTotalMB": 16384,
      "memoryUsedMB": 1024,
      "temperatureC": 55,
      "utilizationPercent": 10,
      "visibleDevices": "all"
    }
    ```
    """
    return aggregator.probe_accelerator()
