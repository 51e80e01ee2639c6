"""
Prediction Service

Process-wide wiring of the prediction engine. Builds the rating store,
feature ensemble, cache and orchestrator from settings once, and exposes
them to the HTTP layer and the CLI.
"""

import logging
from functools import lru_cache

from cricket_predictor.api.schemas.prediction import PredictionInput, PredictionResult
from cricket_predictor.cache import create_prediction_cache
from cricket_predictor.config import ENGINE_BALANCED, ENGINE_FAST, LONGEST_FORMAT
from cricket_predictor.services.prediction import (
    DEFAULT_ENGINE_PROFILES,
    EloRatingModel,
    FeatureEnsemble,
    InMemoryRatingStore,
    KeywordImportance,
    PredictionOrchestrator,
    RatingFeatureProvider,
)
from cricket_predictor.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def build_orchestrator(
    settings: Settings,
    store: InMemoryRatingStore | None = None,
    feature_provider=None,
) -> PredictionOrchestrator:
    """
    Assemble an orchestrator from settings.

    Args:
        settings: Settings instance
        store: Rating store (a fresh in-memory store if omitted)
        feature_provider: Feature provider (rating-derived features if omitted)

    Returns:
        PredictionOrchestrator
    """
    store = store if store is not None else InMemoryRatingStore()
    rating_model = EloRatingModel(
        store,
        sport=settings.sport,
        draw_probabilities={LONGEST_FORMAT: settings.test_draw_probability},
        auto_create=settings.auto_create_ratings,
    )
    provider = feature_provider or RatingFeatureProvider(store, sport=settings.sport)

    orchestrator = PredictionOrchestrator(
        rating_model,
        enhancer=FeatureEnsemble(
            provider,
            baseline_confidence=DEFAULT_ENGINE_PROFILES[ENGINE_FAST].confidence,
            full_confidence=DEFAULT_ENGINE_PROFILES[ENGINE_BALANCED].confidence,
        ),
        cache=create_prediction_cache(settings),
        importance=KeywordImportance(settings.importance_keywords),
    )
    logger.info(
        f"Prediction engine ready: sport={settings.sport}, default_mode={settings.default_mode}"
    )
    return orchestrator


@lru_cache
def get_rating_store() -> InMemoryRatingStore:
    """Get the process-wide rating store."""
    return InMemoryRatingStore()


@lru_cache
def get_predictor() -> PredictionOrchestrator:
    """Get the process-wide orchestrator."""
    return build_orchestrator(get_settings(), store=get_rating_store())


async def generate_prediction(
    input: PredictionInput,
    mode: str | None = None,
    time_constraint: str | None = None,
) -> PredictionResult:
    """
    Predict with the process-wide orchestrator.

    Args:
        input: Prediction request
        mode: 'fast', 'balanced' or 'smart' (settings.default_mode if omitted)
        time_constraint: 'fast', 'balanced' or 'accurate' (smart mode only)

    Returns:
        PredictionResult
    """
    mode = mode or get_settings().default_mode
    logger.info(
        f"Prediction requested: {input.team1_id} vs {input.team2_id} "
        f"({input.format}), mode={mode}, time_constraint={time_constraint}"
    )
    result = await get_predictor().predict(input, mode=mode, time_constraint=time_constraint)
    logger.info(
        f"Prediction completed: engine={result.engine_used}, "
        f"from_cache={bool(result.from_cache)}, {result.processing_time_ms:.1f}ms"
    )
    return result


__all__ = [
    "build_orchestrator",
    "get_rating_store",
    "get_predictor",
    "generate_prediction",
]
