"""
Rating endpoints
"""

import logging

from fastapi import APIRouter, Path, Query, status

from cricket_predictor.api.exceptions import InvalidRequestException, RatingNotFoundException
from cricket_predictor.api.schemas.common import ErrorResponse
from cricket_predictor.api.schemas.prediction import MatchFormat
from cricket_predictor.api.schemas.rating import (
    EntityRating,
    MatchResultRequest,
    MatchResultResponse,
)
from cricket_predictor.exceptions import InvalidMatchResultError
from cricket_predictor.services import prediction_service
from cricket_predictor.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/ratings/results",
    response_model=MatchResultResponse,
    status_code=status.HTTP_200_OK,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
    summary="Record a settled result",
    description="Applies the Elo update for a finished match.",
)
async def record_result(request: MatchResultRequest) -> MatchResultResponse:
    logger.info(
        f"POST /ratings/results: {request.team1_id} vs {request.team2_id} "
        f"({request.format}) -> {request.outcome}"
    )
    try:
        return await prediction_service.get_rating_store().record_result(
            request.team1_id,
            request.team2_id,
            request.format,
            request.outcome,
            sport=get_settings().sport,
            played_at=request.played_at,
        )
    except InvalidMatchResultError as e:
        logger.warning(f"Rejected result: {e}")
        raise InvalidRequestException(str(e))


@router.get(
    "/ratings/{entity_id}",
    response_model=EntityRating,
    status_code=status.HTTP_200_OK,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
    summary="Get a rating",
)
async def get_rating(
    entity_id: str = Path(..., min_length=1, description="Team or player identifier"),
    format: MatchFormat = Query(..., description="Rating context"),
) -> EntityRating:
    logger.debug(f"GET /ratings/{entity_id}?format={format}")
    rating = await prediction_service.get_rating_store().get_rating(
        entity_id, get_settings().sport, format
    )
    if rating is None:
        raise RatingNotFoundException(entity_id, format)
    return rating
