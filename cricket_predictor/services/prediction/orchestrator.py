"""
Prediction Orchestrator Module

Selects an execution tier per request and runs it through an ordered chain
of strategies:

    fast      rating model only                  (~tens of ms)
    balanced  rating model + feature ensemble    (falls back to fast)
    smart     balanced for important matches, fast otherwise

Every stage either returns a result or raises; the chain treats any failure
as "try the next cheaper stage" and ends in the static fallback, so the
predict* methods always return a PredictionResult.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from cricket_predictor.api.schemas.common import CacheStatsResponse
from cricket_predictor.api.schemas.prediction import PredictionInput, PredictionResult
from cricket_predictor.cache import InMemoryPredictionCache, PredictionCache
from cricket_predictor.config import ENGINE_BALANCED, ENGINE_FALLBACK, ENGINE_FAST
from cricket_predictor.exceptions import InvalidProbabilityError, PredictionError
from cricket_predictor.services.prediction.engines import DEFAULT_ENGINE_PROFILES, EngineProfile
from cricket_predictor.services.prediction.fallback import generate_basic_fallback
from cricket_predictor.services.prediction.importance import ImportancePredicate, KeywordImportance

logger = logging.getLogger(__name__)

WEAK_EVIDENCE_RISK = "Limited contextual data"


@dataclass(frozen=True)
class PredictionStrategy:
    """One stage of a fallback chain."""

    name: str
    cache_key: Callable[[PredictionInput], str]
    compute: Callable[[PredictionInput], Awaitable[PredictionResult]]


def _cache_key(*parts: str) -> str:
    # JSON array encoding keeps ids containing separators distinct
    return json.dumps(parts, ensure_ascii=False, separators=(",", ":"))


def fast_cache_key(input: PredictionInput) -> str:
    return _cache_key(ENGINE_FAST, input.team1_id, input.team2_id, input.format)


def balanced_cache_key(input: PredictionInput) -> str:
    venue = (input.venue or "").lower()
    return _cache_key(ENGINE_BALANCED, input.team1_id, input.team2_id, input.format, venue)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class PredictionOrchestrator:
    """
    Tiered match-outcome predictor.

    Args:
        rating_model: Object with async win_probability(team1_id, team2_id, format)
        enhancer: Object with async enhance(base, input) (e.g. FeatureEnsemble);
            without one the balanced tier always degrades to fast
        cache: PredictionCache (defaults to an in-memory cache)
        importance: Predicate deciding whether smart mode uses the balanced tier
        engine_profiles: Engine calibration table
    """

    def __init__(
        self,
        rating_model,
        enhancer=None,
        cache: PredictionCache | None = None,
        importance: ImportancePredicate | None = None,
        engine_profiles: dict[str, EngineProfile] | None = None,
    ):
        self.rating_model = rating_model
        self.enhancer = enhancer
        self.cache = cache if cache is not None else InMemoryPredictionCache()
        self.importance = importance or KeywordImportance()
        self.profiles = {**DEFAULT_ENGINE_PROFILES, **(engine_profiles or {})}

        self._fast = PredictionStrategy(ENGINE_FAST, fast_cache_key, self._compute_fast)
        self._balanced = PredictionStrategy(
            ENGINE_BALANCED, balanced_cache_key, self._compute_balanced
        )

    # ------------------------------------------------------------------
    # Tier computations
    # ------------------------------------------------------------------
    async def _compute_fast(self, input: PredictionInput) -> PredictionResult:
        start = time.perf_counter()
        profile = self.profiles[ENGINE_FAST]

        probs = await self.rating_model.win_probability(
            input.team1_id, input.team2_id, input.format
        )

        try:
            return PredictionResult(
                team1_win_prob=probs.team1_win_prob,
                team2_win_prob=probs.team2_win_prob,
                draw_prob=probs.draw_prob,
                confidence=profile.confidence,
                key_factors=list(profile.key_factors),
                risk_factors=profile.risks_for(input.format),
                model_version=profile.model_version,
                engine_used=profile.display_name,
                accuracy=profile.accuracy(input.format),
                processing_time_ms=_elapsed_ms(start),
            )
        except ValidationError as e:
            raise InvalidProbabilityError(f"Fast tier produced invalid result: {e}") from e

    async def _compute_balanced(self, input: PredictionInput) -> PredictionResult:
        if self.enhancer is None:
            raise PredictionError("No feature ensemble configured")

        start = time.perf_counter()
        profile = self.profiles[ENGINE_BALANCED]

        base = await self.rating_model.win_probability(
            input.team1_id, input.team2_id, input.format
        )
        enhanced = await self.enhancer.enhance(base, input)
        probs = enhanced.probabilities

        risk_factors = profile.risks_for(input.format)
        if enhanced.confidence_level <= self.profiles[ENGINE_FAST].confidence:
            risk_factors.append(WEAK_EVIDENCE_RISK)

        try:
            return PredictionResult(
                team1_win_prob=probs.team1_win_prob,
                team2_win_prob=probs.team2_win_prob,
                draw_prob=probs.draw_prob,
                confidence=enhanced.confidence_level,
                key_factors=enhanced.key_factors or list(profile.key_factors),
                risk_factors=risk_factors,
                model_version=enhanced.model_version or profile.model_version,
                engine_used=profile.display_name,
                accuracy=profile.accuracy(input.format),
                processing_time_ms=_elapsed_ms(start),
            )
        except ValidationError as e:
            raise InvalidProbabilityError(f"Balanced tier produced invalid result: {e}") from e

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    async def _run(self, chain: list[PredictionStrategy], input: PredictionInput) -> PredictionResult:
        start = time.perf_counter()
        matchup = f"{input.team1_id} vs {input.team2_id} ({input.format})"

        for strategy in chain:
            try:
                return await self.cache.get_or_compute(
                    strategy.cache_key(input), lambda s=strategy: s.compute(input)
                )
            except PredictionError as e:
                logger.warning(f"{strategy.name} tier failed for {matchup}: {e}; falling back")
            except Exception as e:
                logger.error(
                    f"Unexpected error in {strategy.name} tier for {matchup}: {e}", exc_info=True
                )

        logger.warning(f"All tiers failed for {matchup}; returning {ENGINE_FALLBACK} estimate")
        return generate_basic_fallback(
            input, _elapsed_ms(start), profile=self.profiles[ENGINE_FALLBACK]
        )

    async def predict_fast(self, input: PredictionInput) -> PredictionResult:
        """Rating model only; static fallback on failure."""
        return await self._run([self._fast], input)

    async def predict_balanced(self, input: PredictionInput) -> PredictionResult:
        """Rating model + feature ensemble; fast tier, then static fallback on failure."""
        return await self._run([self._balanced, self._fast], input)

    def select_tier(self, input: PredictionInput, time_constraint: Optional[str] = None) -> str:
        """
        Choose the tier for smart mode.

        Args:
            input: Prediction request
            time_constraint: 'fast' forces fast; 'balanced' / 'accurate' force balanced;
                None (or unknown) uses the importance heuristic

        Returns:
            'fast' or 'balanced'
        """
        if time_constraint == "fast":
            return ENGINE_FAST
        if time_constraint in ("balanced", "accurate"):
            return ENGINE_BALANCED
        if time_constraint is not None:
            logger.warning(f"Unknown time constraint '{time_constraint}', using importance heuristic")

        try:
            important = bool(self.importance(input))
        except Exception as e:
            logger.error(f"Importance predicate failed: {e}")
            important = False
        return ENGINE_BALANCED if important else ENGINE_FAST

    async def predict_smart(
        self, input: PredictionInput, time_constraint: Optional[str] = None
    ) -> PredictionResult:
        tier = self.select_tier(input, time_constraint)
        logger.debug(f"Smart mode routed {input.team1_id} vs {input.team2_id} to {tier}")
        if tier == ENGINE_BALANCED:
            return await self.predict_balanced(input)
        return await self.predict_fast(input)

    async def predict(
        self,
        input: PredictionInput,
        mode: str = "smart",
        time_constraint: Optional[str] = None,
    ) -> PredictionResult:
        """
        Predict with the requested mode. Never raises.

        Args:
            input: Prediction request
            mode: 'fast', 'balanced' or 'smart' (unknown modes behave as smart)
            time_constraint: Passed to smart mode

        Returns:
            PredictionResult
        """
        if mode == ENGINE_FAST:
            return await self.predict_fast(input)
        if mode == ENGINE_BALANCED:
            return await self.predict_balanced(input)
        if mode != "smart":
            logger.warning(f"Unknown prediction mode '{mode}', using smart")
        return await self.predict_smart(input, time_constraint)

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------
    async def clear_cache(self) -> None:
        await self.cache.clear()

    async def cache_stats(self) -> CacheStatsResponse:
        return await self.cache.stats()
