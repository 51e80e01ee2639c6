"""
Basic fallback prediction used when every computational tier has failed.
"""

from cricket_predictor.api.schemas.prediction import PredictionInput, PredictionResult
from cricket_predictor.config import ENGINE_FALLBACK, FALLBACK_PROBABILITIES
from cricket_predictor.services.prediction.engines import DEFAULT_ENGINE_PROFILES, EngineProfile


def generate_basic_fallback(
    input: PredictionInput,
    processing_time_ms: float = 0.0,
    profile: EngineProfile | None = None,
) -> PredictionResult:
    """
    Static, slightly home-skewed estimate. Never fails.

    Args:
        input: Prediction request
        processing_time_ms: Time spent before giving up on the real engines
        profile: Engine profile (defaults to the fallback entry)

    Returns:
        PredictionResult with low confidence and degraded-data risk factors
    """
    profile = profile or DEFAULT_ENGINE_PROFILES[ENGINE_FALLBACK]
    team1, team2, draw = FALLBACK_PROBABILITIES

    return PredictionResult(
        team1_win_prob=team1,
        team2_win_prob=team2,
        draw_prob=draw,
        confidence=profile.confidence,
        key_factors=list(profile.key_factors),
        risk_factors=profile.risks_for(input.format),
        model_version=profile.model_version,
        engine_used=profile.display_name,
        accuracy=profile.accuracy(input.format),
        processing_time_ms=max(0.0, processing_time_ms),
    )
