"""
Unit tests for the prediction orchestrator.

Covers tier selection, fallback chaining and caching behaviour.
"""

import asyncio

import pytest

from cricket_predictor.api.schemas.prediction import PredictionInput
from cricket_predictor.exceptions import EnhancementUnavailableError
from cricket_predictor.services.prediction import (
    EloRatingModel,
    FeatureEnsemble,
    InMemoryRatingStore,
    KeywordImportance,
    PredictionOrchestrator,
    RatingFeatureProvider,
    balanced_cache_key,
    fast_cache_key,
)


def _without_cache_flag(result) -> dict:
    return result.model_dump(exclude={"from_cache"})


def _total(result) -> float:
    return result.team1_win_prob + result.team2_win_prob + result.draw_prob


class TestCacheKeys:
    """Test memoization key derivation."""

    def test_fast_key(self, t20_input):
        assert fast_cache_key(t20_input) == '["fast","IND","AUS","t20"]'

    def test_balanced_key_normalizes_venue(self, t20_input):
        assert balanced_cache_key(t20_input) == '["balanced","IND","AUS","t20","wankhede stadium"]'

    def test_balanced_key_without_venue(self):
        request = PredictionInput(team1_id="IND", team2_id="AUS", format="odi")

        assert balanced_cache_key(request) == '["balanced","IND","AUS","odi",""]'

    def test_ids_with_separators_stay_distinct(self):
        first = PredictionInput(team1_id="A_B", team2_id="C", format="t20")
        second = PredictionInput(team1_id="A", team2_id="B_C", format="t20")

        assert fast_cache_key(first) != fast_cache_key(second)
        assert balanced_cache_key(first) != balanced_cache_key(second)

    def test_venue_spellings_share_key(self):
        padded = PredictionInput(team1_id="IND", team2_id="AUS", format="t20", venue=" Eden Gardens ")
        lower = PredictionInput(team1_id="IND", team2_id="AUS", format="t20", venue="eden gardens")

        assert balanced_cache_key(padded) == balanced_cache_key(lower)


class TestFastTier:
    """Test the rating-only tier."""

    @pytest.mark.asyncio
    async def test_elo_probability(self, orchestrator, t20_input):
        result = await orchestrator.predict_fast(t20_input)

        assert result.team1_win_prob == pytest.approx(0.7597, abs=0.01)
        assert result.draw_prob == 0.0
        assert result.engine_used == "Elo Rating System"
        assert result.model_version == "fast-v1.0"
        assert result.confidence == pytest.approx(0.75)
        assert result.accuracy == 78.0
        assert result.processing_time_ms >= 0.0

    @pytest.mark.asyncio
    async def test_test_format_risks(self, orchestrator, test_match_input):
        result = await orchestrator.predict_fast(test_match_input)

        assert result.draw_prob == pytest.approx(0.02)
        assert _total(result) == pytest.approx(1.0)
        assert "Weather dependency" in result.risk_factors
        assert result.accuracy == 72.0

    @pytest.mark.asyncio
    async def test_missing_rating_falls_back(self, orchestrator):
        request = PredictionInput(team1_id="IND", team2_id="NZ", format="t20")

        result = await orchestrator.predict_fast(request)

        assert result.engine_used == "Basic Fallback"
        assert result.team1_win_prob == pytest.approx(0.52)


class TestBalancedTier:
    """Test the ensemble tier and its degradation."""

    @pytest.mark.asyncio
    async def test_ensemble_result(self, orchestrator, t20_input):
        result = await orchestrator.predict_balanced(t20_input)

        assert result.engine_used == "Elo + ML Ensemble"
        assert result.model_version == "ensemble-v1.0"
        assert result.team1_win_prob > 0.7597
        assert result.confidence == pytest.approx(0.82)
        assert result.accuracy == 82.0
        assert _total(result) == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_failing_ensemble_returns_fast_result(
        self, rating_store, cache, failing_provider, t20_input
    ):
        orchestrator = PredictionOrchestrator(
            EloRatingModel(rating_store), enhancer=FeatureEnsemble(failing_provider), cache=cache
        )

        balanced = await orchestrator.predict_balanced(t20_input)
        fast = await orchestrator.predict_fast(t20_input)

        assert balanced.engine_used == "Elo Rating System"
        assert balanced.accuracy == 78.0
        assert _without_cache_flag(balanced) == _without_cache_flag(fast)

    @pytest.mark.asyncio
    async def test_degraded_result_not_cached_as_balanced(
        self, rating_store, cache, failing_provider, t20_input
    ):
        orchestrator = PredictionOrchestrator(
            EloRatingModel(rating_store), enhancer=FeatureEnsemble(failing_provider), cache=cache
        )

        await orchestrator.predict_balanced(t20_input)

        assert await cache.get(balanced_cache_key(t20_input)) is None
        assert await cache.get(fast_cache_key(t20_input)) is not None

    @pytest.mark.asyncio
    async def test_no_enhancer_degrades_to_fast(self, rating_store, cache, t20_input):
        orchestrator = PredictionOrchestrator(EloRatingModel(rating_store), cache=cache)

        result = await orchestrator.predict_balanced(t20_input)

        assert result.engine_used == "Elo Rating System"

    @pytest.mark.asyncio
    async def test_weak_evidence_flags_risk(self, rating_store, cache, static_provider, t20_input):
        orchestrator = PredictionOrchestrator(
            EloRatingModel(rating_store),
            enhancer=FeatureEnsemble(static_provider({})),
            cache=cache,
        )

        result = await orchestrator.predict_balanced(t20_input)

        assert result.engine_used == "Elo + ML Ensemble"
        assert result.confidence == pytest.approx(0.75)
        assert "Limited contextual data" in result.risk_factors


class TestTotalFailure:
    """Test the static fallback path."""

    @pytest.mark.asyncio
    async def test_all_tiers_fail(self, cache, failing_provider, failing_rating_model, t20_input):
        orchestrator = PredictionOrchestrator(
            failing_rating_model(), enhancer=FeatureEnsemble(failing_provider), cache=cache
        )

        result = await orchestrator.predict(t20_input, mode="balanced")

        assert result.engine_used == "Basic Fallback"
        assert result.accuracy < 70
        assert result.risk_factors
        assert result.confidence == pytest.approx(0.60)
        assert (result.team1_win_prob, result.team2_win_prob, result.draw_prob) == (0.52, 0.46, 0.02)

    @pytest.mark.asyncio
    async def test_fallback_not_cached(self, cache, failing_rating_model, t20_input):
        model = failing_rating_model()
        orchestrator = PredictionOrchestrator(model, cache=cache)

        await orchestrator.predict_fast(t20_input)
        await orchestrator.predict_fast(t20_input)

        assert model.calls == 2
        assert (await cache.stats()).size == 0

    @pytest.mark.asyncio
    async def test_unexpected_error_never_raises(self, cache, failing_rating_model, t20_input):
        orchestrator = PredictionOrchestrator(
            failing_rating_model(ZeroDivisionError("boom")), cache=cache
        )

        for mode in ("fast", "balanced", "smart"):
            result = await orchestrator.predict(t20_input, mode=mode)
            assert result.engine_used == "Basic Fallback"


class TestSmartMode:
    """Test tier selection."""

    @pytest.mark.asyncio
    async def test_important_match_uses_balanced(self, orchestrator, final_input):
        result = await orchestrator.predict(final_input)

        assert result.engine_used == "Elo + ML Ensemble"

    @pytest.mark.asyncio
    async def test_friendly_uses_fast(self, orchestrator, t20_input):
        result = await orchestrator.predict(t20_input)

        assert result.engine_used == "Elo Rating System"

    @pytest.mark.asyncio
    async def test_series_context_counts(self, orchestrator):
        request = PredictionInput(
            team1_id="IND", team2_id="AUS", format="t20", series_context="Semi-final"
        )

        assert orchestrator.select_tier(request) == "balanced"

    @pytest.mark.parametrize(
        "constraint,expected",
        [("fast", "fast"), ("balanced", "balanced"), ("accurate", "balanced")],
    )
    def test_time_constraint_overrides_importance(self, orchestrator, final_input, constraint, expected):
        assert orchestrator.select_tier(final_input, time_constraint=constraint) == expected

    def test_unknown_time_constraint_uses_heuristic(self, orchestrator, final_input, t20_input):
        assert orchestrator.select_tier(final_input, time_constraint="whenever") == "balanced"
        assert orchestrator.select_tier(t20_input, time_constraint="whenever") == "fast"

    def test_custom_importance_predicate(self, rating_store, final_input):
        orchestrator = PredictionOrchestrator(
            EloRatingModel(rating_store), importance=KeywordImportance(["trophy"])
        )
        trophy = PredictionInput(
            team1_id="IND", team2_id="AUS", format="test", tournament="Border-Gavaskar Trophy"
        )

        assert orchestrator.select_tier(final_input) == "fast"
        assert orchestrator.select_tier(trophy) == "balanced"

    def test_failing_importance_predicate_uses_fast(self, rating_store, final_input):
        def broken(input):
            raise KeyError("tournament")

        orchestrator = PredictionOrchestrator(EloRatingModel(rating_store), importance=broken)

        assert orchestrator.select_tier(final_input) == "fast"

    @pytest.mark.asyncio
    async def test_unknown_mode_behaves_as_smart(self, orchestrator, final_input):
        result = await orchestrator.predict(final_input, mode="turbo")

        assert result.engine_used == "Elo + ML Ensemble"


class TestCaching:
    """Test memoization through the orchestrator."""

    @pytest.mark.asyncio
    async def test_repeat_call_from_cache(self, orchestrator, t20_input):
        first = await orchestrator.predict_fast(t20_input)
        second = await orchestrator.predict_fast(t20_input)

        assert first.from_cache is None
        assert second.from_cache is True
        assert _without_cache_flag(first) == _without_cache_flag(second)

    @pytest.mark.asyncio
    async def test_recompute_after_ttl(self, orchestrator, rating_store, clock, t20_input):
        first = await orchestrator.predict_fast(t20_input)
        await rating_store.record_result("AUS", "IND", "t20", "team1")

        stale = await orchestrator.predict_fast(t20_input)
        clock.advance(300)
        fresh = await orchestrator.predict_fast(t20_input)

        assert stale.team1_win_prob == first.team1_win_prob
        assert fresh.from_cache is None
        assert fresh.team1_win_prob < first.team1_win_prob

    @pytest.mark.asyncio
    async def test_concurrent_requests_compute_once(self, rating_store, cache, t20_input):
        model = EloRatingModel(rating_store)
        calls = 0
        original = model.win_probability

        async def slow_win_probability(*args):
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return await original(*args)

        model.win_probability = slow_win_probability
        orchestrator = PredictionOrchestrator(model, cache=cache)

        results = await asyncio.gather(*(orchestrator.predict_fast(t20_input) for _ in range(10)))

        assert calls == 1
        assert len({r.team1_win_prob for r in results}) == 1

    @pytest.mark.asyncio
    async def test_clear_cache_and_stats(self, orchestrator, t20_input, final_input):
        await orchestrator.predict_fast(t20_input)
        await orchestrator.predict_fast(t20_input)
        await orchestrator.predict_balanced(final_input)

        stats = await orchestrator.cache_stats()
        assert stats.size == 2
        assert stats.hit_rate == pytest.approx(1 / 3)

        await orchestrator.clear_cache()
        stats = await orchestrator.cache_stats()
        assert stats.size == 0
        assert stats.hit_rate == 0.0

    @pytest.mark.asyncio
    async def test_separator_ids_do_not_share_entries(self, rating_factory, cache):
        store = InMemoryRatingStore()
        store.load_ratings(
            [
                rating_factory("A_B", "t20", 1800.0),
                rating_factory("C", "t20", 1200.0),
                rating_factory("A", "t20", 1200.0),
                rating_factory("B_C", "t20", 1800.0),
            ]
        )
        orchestrator = PredictionOrchestrator(EloRatingModel(store), cache=cache)

        favourite = await orchestrator.predict_fast(
            PredictionInput(team1_id="A_B", team2_id="C", format="t20")
        )
        underdog = await orchestrator.predict_fast(
            PredictionInput(team1_id="A", team2_id="B_C", format="t20")
        )

        assert favourite.team1_win_prob > 0.9
        assert underdog.from_cache is None
        assert underdog.team1_win_prob < 0.1

    @pytest.mark.asyncio
    async def test_venue_spellings_compute_same_result(self, rating_store):
        from cricket_predictor.cache import InMemoryPredictionCache

        def build():
            provider = RatingFeatureProvider(rating_store, home_venues={"Eden Gardens": "AUS"})
            return PredictionOrchestrator(
                EloRatingModel(rating_store),
                enhancer=FeatureEnsemble(provider),
                cache=InMemoryPredictionCache(),
            )

        padded = PredictionInput(team1_id="IND", team2_id="AUS", format="t20", venue="Eden Gardens ")
        lower = PredictionInput(team1_id="IND", team2_id="AUS", format="t20", venue="eden gardens")

        first = await build().predict_balanced(padded)
        second = await build().predict_balanced(lower)

        assert "Venue factors" in first.key_factors
        assert first.team1_win_prob == second.team1_win_prob


class TestEnhancementErrors:
    """Test typed failures from a custom enhancer."""

    @pytest.mark.asyncio
    async def test_enhancer_typed_failure(self, rating_store, cache, t20_input):
        class Unavailable:
            async def enhance(self, base, input):
                raise EnhancementUnavailableError("odds feed offline")

        orchestrator = PredictionOrchestrator(
            EloRatingModel(rating_store), enhancer=Unavailable(), cache=cache
        )

        result = await orchestrator.predict_balanced(t20_input)

        assert result.engine_used == "Elo Rating System"
