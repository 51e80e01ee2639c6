"""
Shared pytest fixtures for cricket-predictor tests.

Provides rating stores, orchestrators, controllable clocks, stub feature
providers and the API client.
"""

import os
from typing import Any, Dict, List

import pytest
from unittest.mock import patch

from cricket_predictor.api.schemas.prediction import PredictionInput
from cricket_predictor.cache import InMemoryPredictionCache
from cricket_predictor.exceptions import MissingRatingError
from cricket_predictor.services.prediction import (
    EloRatingModel,
    FeatureEnsemble,
    InMemoryRatingStore,
    PredictionOrchestrator,
)


# =============================================================================
# Helpers
# =============================================================================


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticFeatureProvider:
    """Returns the same features for every match and counts calls."""

    def __init__(self, features: Dict[str, Any]):
        self.features = features
        self.calls = 0

    async def get_features(self, input):
        self.calls += 1
        return self.features


class FailingFeatureProvider:
    """Always fails, simulating an unavailable feature service."""

    async def get_features(self, input):
        raise ConnectionError("feature service unreachable")


class FailingRatingModel:
    """Rating model whose lookups always fail."""

    def __init__(self, exc: Exception | None = None):
        self.exc = exc or MissingRatingError("IND", "t20")
        self.calls = 0

    async def win_probability(self, team1_id, team2_id, format):
        self.calls += 1
        raise self.exc


def make_rating(entity_id: str, context: str, elo: float, form: float | None = None) -> Dict[str, Any]:
    """Rating record in the shape accepted by InMemoryRatingStore.load_ratings."""
    return {
        "entity_id": entity_id,
        "sport": "cricket",
        "context": context,
        "elo_rating": elo,
        "glicko_rating": elo,
        "form_rating": elo if form is None else form,
        "peak_rating": elo,
    }


# =============================================================================
# Stub Fixtures
# =============================================================================


@pytest.fixture
def rating_factory():
    return make_rating


@pytest.fixture
def static_provider():
    """Factory for providers returning fixed features."""
    return StaticFeatureProvider


@pytest.fixture
def failing_provider() -> FailingFeatureProvider:
    return FailingFeatureProvider()


@pytest.fixture
def failing_rating_model():
    """Factory for rating models that raise the given exception."""
    return FailingRatingModel


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def sample_ratings() -> List[Dict[str, Any]]:
    """IND rated 1600 and AUS 1400 in every format."""
    records = []
    for context in ("t20", "odi", "test"):
        records.append(make_rating("IND", context, 1600.0))
        records.append(make_rating("AUS", context, 1400.0))
    return records


@pytest.fixture
def t20_input() -> PredictionInput:
    return PredictionInput(
        team1_id="IND",
        team2_id="AUS",
        team1_name="India",
        team2_name="Australia",
        venue="Wankhede Stadium",
        format="t20",
        tournament="Friendly T20",
    )


@pytest.fixture
def test_match_input() -> PredictionInput:
    return PredictionInput(
        team1_id="IND",
        team2_id="AUS",
        venue="Melbourne Cricket Ground",
        format="test",
        tournament="Border-Gavaskar Trophy",
    )


@pytest.fixture
def final_input() -> PredictionInput:
    return PredictionInput(
        team1_id="IND",
        team2_id="AUS",
        venue="Narendra Modi Stadium",
        format="odi",
        tournament="ICC World Cup Final",
    )


@pytest.fixture
def strong_features() -> Dict[str, Any]:
    return {
        "team1_form": 40.0,
        "team2_form": -20.0,
        "venue_advantage": 1.0,
        "h2h_team1_wins": 7,
        "h2h_team2_wins": 3,
    }


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def rating_store(sample_ratings) -> InMemoryRatingStore:
    store = InMemoryRatingStore()
    store.load_ratings(sample_ratings)
    return store


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> InMemoryPredictionCache:
    return InMemoryPredictionCache(ttl_seconds=300, capacity=100, clock=clock)


@pytest.fixture
def orchestrator(rating_store, cache, strong_features) -> PredictionOrchestrator:
    return PredictionOrchestrator(
        EloRatingModel(rating_store),
        enhancer=FeatureEnsemble(StaticFeatureProvider(strong_features)),
        cache=cache,
    )


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client(sample_ratings):
    """FastAPI test client backed by a fresh, seeded engine."""
    from fastapi.testclient import TestClient

    from cricket_predictor.services import prediction_service

    prediction_service.get_predictor.cache_clear()
    prediction_service.get_rating_store.cache_clear()
    prediction_service.get_rating_store().load_ratings(sample_ratings)

    from cricket_predictor.api.main import app

    with TestClient(app) as client:
        yield client

    prediction_service.get_predictor.cache_clear()
    prediction_service.get_rating_store.cache_clear()


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_environment():
    """Reset environment variables after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_settings():
    """Mock settings for testing."""
    with patch("cricket_predictor.services.prediction_service.get_settings") as mock:
        mock.return_value.default_mode = "smart"
        mock.return_value.sport = "cricket"
        yield mock.return_value
