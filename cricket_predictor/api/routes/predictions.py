"""
Prediction endpoints
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Query, status

from cricket_predictor.api.exceptions import CacheUnavailableException
from cricket_predictor.api.schemas.common import (
    CacheStatsResponse,
    ErrorResponse,
    MessageResponse,
)
from cricket_predictor.api.schemas.prediction import PredictionInput, PredictionResult
from cricket_predictor.exceptions import CacheError
from cricket_predictor.services import prediction_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/predict/fast",
    response_model=PredictionResult,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Fast prediction",
    description="Elo ratings only. Always returns a prediction.",
)
async def predict_fast(request: PredictionInput) -> PredictionResult:
    logger.info(f"POST /predict/fast: {request.team1_id} vs {request.team2_id} ({request.format})")
    return await prediction_service.generate_prediction(request, mode="fast")


@router.post(
    "/predict/balanced",
    response_model=PredictionResult,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Balanced prediction",
    description="Elo ratings + feature ensemble, degrading to fast on failure.",
)
async def predict_balanced(request: PredictionInput) -> PredictionResult:
    logger.info(
        f"POST /predict/balanced: {request.team1_id} vs {request.team2_id} ({request.format})"
    )
    return await prediction_service.generate_prediction(request, mode="balanced")


@router.post(
    "/predict/smart",
    response_model=PredictionResult,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Smart prediction",
    description="Chooses the engine from match importance unless a mode or time constraint is given.",
)
async def predict_smart(
    request: PredictionInput,
    mode: Literal["fast", "balanced", "smart"] = Query("smart", description="Prediction mode"),
    time_constraint: Optional[Literal["fast", "balanced", "accurate"]] = Query(
        None, description="Force a tier in smart mode"
    ),
) -> PredictionResult:
    logger.info(
        f"POST /predict/smart: {request.team1_id} vs {request.team2_id} ({request.format}), "
        f"mode={mode}, time_constraint={time_constraint}"
    )
    return await prediction_service.generate_prediction(
        request, mode=mode, time_constraint=time_constraint
    )


@router.post(
    "/predict/cache/clear",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse}},
    summary="Clear prediction cache",
)
async def clear_cache() -> MessageResponse:
    logger.info("POST /predict/cache/clear")
    try:
        await prediction_service.get_predictor().clear_cache()
    except CacheError as e:
        logger.error(f"Failed to clear cache: {e}")
        raise CacheUnavailableException(str(e))
    return MessageResponse(message="Prediction cache cleared successfully")


@router.get(
    "/predict/cache/stats",
    response_model=CacheStatsResponse,
    status_code=status.HTTP_200_OK,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse}},
    summary="Prediction cache statistics",
)
async def cache_stats() -> CacheStatsResponse:
    logger.debug("GET /predict/cache/stats")
    try:
        return await prediction_service.get_predictor().cache_stats()
    except CacheError as e:
        logger.error(f"Failed to get cache stats: {e}")
        raise CacheUnavailableException(str(e))
