"""
API Schemas

Pydantic models shared by the prediction engine and the HTTP layer.
"""

from cricket_predictor.api.schemas.common import (
    CacheStatsResponse,
    ErrorDetail,
    ErrorResponse,
    HealthCheckResponse,
    MessageResponse,
)
from cricket_predictor.api.schemas.prediction import (
    EnhancedPrediction,
    MatchFeatures,
    MatchFormat,
    PredictionInput,
    PredictionResult,
    WinProbabilities,
)
from cricket_predictor.api.schemas.rating import (
    EntityRating,
    MatchResultRequest,
    MatchResultResponse,
)

__all__ = [
    # Common
    "ErrorDetail",
    "ErrorResponse",
    "HealthCheckResponse",
    "CacheStatsResponse",
    "MessageResponse",
    # Prediction
    "MatchFormat",
    "PredictionInput",
    "PredictionResult",
    "WinProbabilities",
    "MatchFeatures",
    "EnhancedPrediction",
    # Rating
    "EntityRating",
    "MatchResultRequest",
    "MatchResultResponse",
]
