"""
Common schemas (error responses, health, cache management)
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from cricket_predictor.api.schemas.prediction import CamelModel


class ErrorDetail(BaseModel):
    """Error response detail"""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    details: dict[str, Any] | None = Field(
        None, description="Additional information"
    )


class ErrorResponse(BaseModel):
    """Error response body as raised through HTTPException"""

    detail: ErrorDetail


class HealthCheckResponse(BaseModel):
    """Health check response"""

    status: str = Field(..., description="Status (ok/degraded)")
    timestamp: datetime = Field(..., description="Check time")
    cache: str | None = Field(
        None, description="Cache backend state (available/unavailable)"
    )


class CacheStatsResponse(CamelModel):
    """Prediction cache statistics"""

    size: int = Field(..., ge=0, description="Live entries")
    hit_rate: float = Field(..., ge=0.0, le=1.0, description="Measured hit rate")


class MessageResponse(BaseModel):
    """Plain acknowledgement"""

    message: str
