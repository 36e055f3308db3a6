"""
Common Response Models - Standardized API response structures.

This module defines the base and error envelopes shared by every endpoint.
"""

from typing import Optional
from datetime import datetime, timezone
from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseResponse(BaseModel):
    """
    Base response model for all API responses.

    Provides a common timestamp field.
    """
    timestamp: datetime = Field(default_factory=utcnow, description="Response timestamp (UTC)")


class ErrorDetail(BaseModel):
    """
    Detailed error information.

    Provides structured error data with code, message, and optional details.
    """
    code: str = Field(..., description="Error code (e.g., INTERNAL_ERROR, NOT_FOUND)")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[str] = Field(None, description="Additional error details or context")


class ErrorResponse(BaseResponse):
    """
    Standard error response for all API errors.

    Keeps non-2xx responses distinguishable from a degraded but successful status payload.
    """
    error: ErrorDetail = Field(..., description="Error details")
