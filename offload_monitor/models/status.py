"""
Status Models - Accelerator, offload and host snapshot structures.

JSON field names are camelCase because the dashboard page consumes them
directly; Python code uses the snake_case attribute names.
"""

from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .common import BaseResponse, utcnow


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DetectionMethod(str, Enum):
    """Which detection tier produced an AcceleratorInfo."""
    EXTERNAL_TOOL = "nvidia-smi"
    ENVIRONMENT_VARIABLE = "Environment Variables"
    NOT_DETECTED = "Not Detected"
    DETECTION_FAILED = "Detection Failed"


class AcceleratorInfo(CamelModel):
    """Result of one accelerator probe."""
    detected: bool = Field(..., description="Whether an accelerator is visible to the process")
    method: DetectionMethod = Field(..., description="Detection tier that produced this result")
    details: str = Field("", description="Human readable description of the detection tier")
    name: str = Field(..., description="Accelerator model name")
    memory_total_mb: int = Field(0, ge=0, alias="memoryTotalMB", description="Total accelerator memory in MB")
    memory_used_mb: int = Field(0, ge=0, alias="memoryUsedMB", description="Used accelerator memory in MB")
    temperature_c: int = Field(0, description="Accelerator temperature in Celsius")
    utilization_percent: int = Field(0, ge=0, le=100, description="Accelerator utilization percentage")
    visible_devices: Optional[str] = Field(None, description="Value of the accelerator visibility variable, if set")


class OffloadStatus(CamelModel):
    """
    Whether the process appears to run in an offloaded container.

    `enabled` is a heuristic and can be a false positive.
    """
    enabled: bool
    hostname: str
    is_containerized: bool


class SystemSnapshot(CamelModel):
    """Host and process metrics at a single point in time."""
    hostname: str
    platform_name: str
    architecture: str
    cpu_core_count: int = Field(1, ge=1)
    total_memory_gb: float = Field(0.0, ge=0, alias="totalMemoryGB")
    free_memory_gb: float = Field(0.0, ge=0, alias="freeMemoryGB")
    used_memory_gb: float = Field(0.0, ge=0, alias="usedMemoryGB")
    memory_usage_percent: int = Field(0, ge=0, le=100)
    process_uptime_seconds: float = Field(0.0, ge=0)
    host_uptime_seconds: float = Field(0.0, ge=0)
    started_at: datetime
    runtime_version: str


class StatusResponse(CamelModel):
    """Composition returned by /api/status, built fresh per request."""
    accelerator: AcceleratorInfo
    offload: OffloadStatus
    system: SystemSnapshot
    generated_at: datetime = Field(default_factory=utcnow)


class HealthResponse(BaseResponse):
    model_config = ConfigDict(populate_by_name=True)

    status: str = "healthy"
    uptime: float = Field(..., ge=0, description="Process uptime in seconds")
    environment: str = Field(..., description="Runtime mode")
    refresh_interval: int = Field(..., ge=1, alias="refreshInterval", description="Dashboard polling interval in seconds")
