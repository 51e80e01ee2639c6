"""
Prediction Engine Module

Rating model, feature ensemble, static fallback and the orchestrator that
chains them.
"""

from cricket_predictor.services.prediction.engines import (
    DEFAULT_ENGINE_PROFILES,
    EngineProfile,
)
from cricket_predictor.services.prediction.fallback import generate_basic_fallback
from cricket_predictor.services.prediction.feature_ensemble import (
    FeatureEnsemble,
    FeatureProvider,
    RatingFeatureProvider,
    evidence_strength,
)
from cricket_predictor.services.prediction.importance import KeywordImportance
from cricket_predictor.services.prediction.orchestrator import (
    PredictionOrchestrator,
    PredictionStrategy,
    balanced_cache_key,
    fast_cache_key,
)
from cricket_predictor.services.prediction.rating_model import (
    EloRatingModel,
    elo_expected_score,
)
from cricket_predictor.services.prediction.rating_store import InMemoryRatingStore

__all__ = [
    # Rating model
    "elo_expected_score",
    "EloRatingModel",
    "InMemoryRatingStore",
    # Feature ensemble
    "FeatureProvider",
    "FeatureEnsemble",
    "RatingFeatureProvider",
    "evidence_strength",
    # Engines
    "EngineProfile",
    "DEFAULT_ENGINE_PROFILES",
    "generate_basic_fallback",
    # Orchestrator
    "KeywordImportance",
    "PredictionStrategy",
    "PredictionOrchestrator",
    "fast_cache_key",
    "balanced_cache_key",
]
