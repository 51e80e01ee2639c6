"""
Health check endpoint
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status

from cricket_predictor.api.schemas.common import HealthCheckResponse
from cricket_predictor.exceptions import CacheError
from cricket_predictor.services import prediction_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Reports service liveness and cache backend state",
)
async def health_check() -> HealthCheckResponse:
    """
    Health check

    The prediction engine itself cannot be unavailable (it degrades to the
    static fallback), so only the cache backend is probed.

    Returns:
        HealthCheckResponse: health check result
    """
    logger.debug("Health check requested")

    cache_status = "available"
    try:
        await prediction_service.get_predictor().cache_stats()
    except CacheError as e:
        logger.error(f"Cache check failed: {e}")
        cache_status = "unavailable"

    overall_status = "ok" if cache_status == "available" else "degraded"

    logger.info(f"Health check result: status={overall_status}, cache={cache_status}")

    return HealthCheckResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        cache=cache_status,
    )
