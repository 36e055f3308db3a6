"""
Models Package - Response structures for the status API.
"""

from .common import BaseResponse, ErrorDetail, ErrorResponse
from .status import (
    AcceleratorInfo,
    DetectionMethod,
    HealthResponse,
    OffloadStatus,
    StatusResponse,
    SystemSnapshot,
)

__all__ = [
    "BaseResponse",
    "ErrorDetail",
    "ErrorResponse",
    "AcceleratorInfo",
    "DetectionMethod",
    "HealthResponse",
    "OffloadStatus",
    "StatusResponse",
    "SystemSnapshot",
]
