"""
Feature Ensemble Module

Blends the rating model's distribution with contextual signals (recent form,
home venue, head-to-head record). The rating prior is shifted in log-odds
space, so the draw mass is preserved and the result stays a valid distribution.
"""

import logging
import math
from typing import Any, Protocol

import numpy as np
from pydantic import ValidationError

from cricket_predictor.api.schemas.prediction import (
    EnhancedPrediction,
    MatchFeatures,
    PredictionInput,
    WinProbabilities,
)
from cricket_predictor.config import (
    ENGINE_BALANCED,
    ENGINE_CONFIDENCE,
    ENGINE_FAST,
    ENSEMBLE_FORM_WEIGHT,
    ENSEMBLE_H2H_WEIGHT,
    ENSEMBLE_MAX_SHIFT,
    ENSEMBLE_VENUE_WEIGHT,
    ENSEMBLE_WEAK_EVIDENCE,
    H2H_FULL_EVIDENCE_MATCHES,
    SPORT_CRICKET,
)
from cricket_predictor.exceptions import EnhancementUnavailableError

logger = logging.getLogger(__name__)

ENSEMBLE_MODEL_VERSION = "ensemble-v1.0"

# Relative weight of each signal in the evidence strength
EVIDENCE_WEIGHTS = {"form": 0.4, "venue": 0.2, "h2h": 0.4}

_EPS = 1e-6


class FeatureProvider(Protocol):
    """Source of contextual signals for one match."""

    async def get_features(self, input: PredictionInput) -> MatchFeatures | dict[str, Any]:
        ...


def _logit(p: float) -> float:
    p = min(max(p, _EPS), 1.0 - _EPS)
    return math.log(p / (1.0 - p))


def _sigmoid(x: float) -> float:
    return 1.0 / (1.0 + math.exp(-x))


def evidence_strength(features: MatchFeatures) -> float:
    """
    How much contextual evidence backs the adjustment (0.0-1.0).

    Form counts when the provider reports any deviation from the base rating,
    venue when one side is at home, head-to-head in proportion to the number
    of meetings (saturating at H2H_FULL_EVIDENCE_MATCHES).
    """
    coverage = np.array([
        1.0 if (features.team1_form or features.team2_form) else 0.0,
        1.0 if features.venue_advantage else 0.0,
        min(1.0, features.h2h_matches / H2H_FULL_EVIDENCE_MATCHES),
    ])
    weights = np.array([EVIDENCE_WEIGHTS["form"], EVIDENCE_WEIGHTS["venue"], EVIDENCE_WEIGHTS["h2h"]])
    return float(np.average(coverage, weights=weights))


class FeatureEnsemble:
    """
    Rating prior + contextual adjustment.

    Args:
        provider: FeatureProvider supplying MatchFeatures
        form_weight: Log-odds shift per point of form difference
        venue_weight: Log-odds shift for a home side
        h2h_weight: Log-odds shift per unit of (head-to-head share - 0.5)
        max_shift: Clamp on the total log-odds shift
        baseline_confidence: Confidence with weak or no evidence (the fast tier's)
        full_confidence: Confidence at full evidence strength (the balanced tier's)
    """

    def __init__(
        self,
        provider: FeatureProvider,
        form_weight: float = ENSEMBLE_FORM_WEIGHT,
        venue_weight: float = ENSEMBLE_VENUE_WEIGHT,
        h2h_weight: float = ENSEMBLE_H2H_WEIGHT,
        max_shift: float = ENSEMBLE_MAX_SHIFT,
        baseline_confidence: float = ENGINE_CONFIDENCE[ENGINE_FAST],
        full_confidence: float = ENGINE_CONFIDENCE[ENGINE_BALANCED],
    ):
        self.provider = provider
        self.form_weight = form_weight
        self.venue_weight = venue_weight
        self.h2h_weight = h2h_weight
        self.max_shift = max_shift
        self.baseline_confidence = baseline_confidence
        self.full_confidence = full_confidence

    async def _load_features(self, input: PredictionInput) -> MatchFeatures:
        try:
            raw = await self.provider.get_features(input)
        except EnhancementUnavailableError:
            raise
        except Exception as e:
            raise EnhancementUnavailableError(f"Feature provider failed: {e}") from e

        if raw is None:
            raise EnhancementUnavailableError("Feature provider returned no data")
        try:
            if isinstance(raw, MatchFeatures):
                return raw
            return MatchFeatures.model_validate(raw)
        except ValidationError as e:
            raise EnhancementUnavailableError(f"Malformed feature data: {e}") from e

    def _shift(self, features: MatchFeatures) -> float:
        form_diff = features.team1_form - features.team2_form
        shift = self.form_weight * form_diff + self.venue_weight * features.venue_advantage

        if features.h2h_matches:
            share = features.h2h_team1_wins / features.h2h_matches
            reliability = min(1.0, features.h2h_matches / H2H_FULL_EVIDENCE_MATCHES)
            shift += self.h2h_weight * (share - 0.5) * reliability

        return max(-self.max_shift, min(self.max_shift, shift))

    async def enhance(self, base: WinProbabilities, input: PredictionInput) -> EnhancedPrediction:
        """
        Adjust the rating prior with contextual features.

        Args:
            base: Rating model distribution
            input: Prediction request

        Returns:
            EnhancedPrediction with adjusted probabilities and confidence

        Raises:
            EnhancementUnavailableError: provider failed or returned invalid data
        """
        features = await self._load_features(input)

        draw = base.draw_prob
        win_mass = 1.0 - draw
        share = base.team1_win_prob / win_mass if win_mass > 0 else 0.5
        shift = self._shift(features)
        new_share = _sigmoid(_logit(share) + shift)

        probs = np.clip(
            np.array([new_share * win_mass, (1.0 - new_share) * win_mass, draw]), 0.0, 1.0
        )
        probs = probs / probs.sum()

        strength = evidence_strength(features)
        if strength < ENSEMBLE_WEAK_EVIDENCE:
            confidence = self.baseline_confidence
        else:
            confidence = self.baseline_confidence + (
                self.full_confidence - self.baseline_confidence
            ) * strength

        key_factors = ["Team strength (Elo ratings)"]
        if features.team1_form or features.team2_form:
            key_factors.append("Recent form")
        if features.venue_advantage:
            key_factors.append("Venue factors")
        if features.h2h_matches:
            key_factors.append("Head-to-head record")

        logger.debug(
            f"Ensemble {input.team1_id} vs {input.team2_id}: share {share:.4f}->{new_share:.4f}, "
            f"shift={shift:+.3f}, evidence={strength:.2f}"
        )

        try:
            probabilities = WinProbabilities(
                team1_win_prob=float(probs[0]),
                team2_win_prob=float(probs[1]),
                draw_prob=float(probs[2]),
            )
        except ValidationError as e:
            raise EnhancementUnavailableError(f"Invalid enhanced distribution: {e}") from e

        return EnhancedPrediction(
            probabilities=probabilities,
            confidence_level=confidence,
            model_version=ENSEMBLE_MODEL_VERSION,
            evidence_strength=strength,
            key_factors=key_factors,
        )


class RatingFeatureProvider:
    """
    Features derived from the rating store plus optional venue / head-to-head tables.

    Args:
        store: Rating lookup
        sport: Sport whose ratings are consulted
        home_venues: {venue name: team_id} for home-advantage detection
        head_to_head: {(team_a, team_b): (a_wins, b_wins)}
    """

    def __init__(
        self,
        store,
        sport: str = SPORT_CRICKET,
        home_venues: dict[str, str] | None = None,
        head_to_head: dict[tuple[str, str], tuple[int, int]] | None = None,
    ):
        self.store = store
        self.sport = sport
        self.home_venues = {k.strip().lower(): v for k, v in (home_venues or {}).items()}
        self.head_to_head = dict(head_to_head or {})

    async def _form(self, entity_id: str, context: str) -> float:
        rating = await self.store.get_rating(entity_id, self.sport, context)
        if rating is None:
            raise EnhancementUnavailableError(f"No rating for form of '{entity_id}' ({context})")
        return rating.form_rating - rating.elo_rating

    def _venue_advantage(self, input: PredictionInput) -> float:
        if not input.venue:
            return 0.0
        home_team = self.home_venues.get(input.venue.lower())
        if home_team == input.team1_id:
            return 1.0
        if home_team == input.team2_id:
            return -1.0
        return 0.0

    def _h2h(self, team1_id: str, team2_id: str) -> tuple[int, int]:
        if (team1_id, team2_id) in self.head_to_head:
            wins1, wins2 = self.head_to_head[(team1_id, team2_id)]
            return wins1, wins2
        if (team2_id, team1_id) in self.head_to_head:
            wins2, wins1 = self.head_to_head[(team2_id, team1_id)]
            return wins1, wins2
        return 0, 0

    async def get_features(self, input: PredictionInput) -> dict[str, Any]:
        wins1, wins2 = self._h2h(input.team1_id, input.team2_id)
        return {
            "team1_form": await self._form(input.team1_id, input.format),
            "team2_form": await self._form(input.team2_id, input.format),
            "venue_advantage": self._venue_advantage(input),
            "h2h_team1_wins": wins1,
            "h2h_team2_wins": wins2,
        }
