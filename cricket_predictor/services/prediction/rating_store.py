"""
Rating Store Module

Holds one EntityRating per (entity, sport, context) and applies the Elo
update after each settled match. Ratings are never deleted; every update
supersedes the previous record.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Iterable

from cricket_predictor.api.schemas.rating import EntityRating, MatchResultResponse
from cricket_predictor.config import (
    ELO_INITIAL_RATING,
    ELO_K_FACTORS,
    FORM_K_MULTIPLIER,
    SPORT_CRICKET,
)
from cricket_predictor.exceptions import InvalidMatchResultError
from cricket_predictor.services.prediction.rating_model import elo_expected_score

logger = logging.getLogger(__name__)

OUTCOME_SCORES = {"team1": 1.0, "team2": 0.0, "draw": 0.5}


class InMemoryRatingStore:
    """Process-local rating store; suitable for tests, the CLI and single-worker use."""

    def __init__(
        self,
        initial_rating: float = ELO_INITIAL_RATING,
        k_factors: dict[str, float] | None = None,
    ):
        self.initial_rating = initial_rating
        self.k_factors = dict(k_factors or ELO_K_FACTORS)
        self._ratings: dict[tuple[str, str, str], EntityRating] = {}
        self._lock = threading.Lock()

    async def get_rating(self, entity_id: str, sport: str, context: str) -> EntityRating | None:
        with self._lock:
            return self._ratings.get((entity_id, sport, context))

    async def ensure_rating(self, entity_id: str, sport: str, context: str) -> EntityRating:
        """Return the rating, creating it at the initial value on first sight."""
        with self._lock:
            return self._ensure_locked(entity_id, sport, context)

    def _ensure_locked(self, entity_id: str, sport: str, context: str) -> EntityRating:
        key = (entity_id, sport, context)
        rating = self._ratings.get(key)
        if rating is None:
            rating = EntityRating(
                entity_id=entity_id,
                sport=sport,
                context=context,
                elo_rating=self.initial_rating,
                glicko_rating=self.initial_rating,
                form_rating=self.initial_rating,
                peak_rating=self.initial_rating,
                updated_at=datetime.now(timezone.utc),
            )
            self._ratings[key] = rating
            logger.info(f"Rating created: {entity_id} ({sport}/{context}) at {self.initial_rating}")
        return rating

    def load_ratings(self, records: Iterable[dict | EntityRating]) -> int:
        """
        Bulk-load ratings (e.g. from the upstream refresh job or a JSON file).

        Args:
            records: EntityRating instances or dicts (snake_case or camelCase keys)

        Returns:
            Number of ratings loaded
        """
        count = 0
        with self._lock:
            for record in records:
                rating = (
                    record if isinstance(record, EntityRating)
                    else EntityRating.model_validate(record)
                )
                self._ratings[(rating.entity_id, rating.sport, rating.context)] = rating
                count += 1
        logger.info(f"Loaded {count} ratings")
        return count

    def all_ratings(self) -> list[EntityRating]:
        with self._lock:
            return list(self._ratings.values())

    async def record_result(
        self,
        team1_id: str,
        team2_id: str,
        context: str,
        outcome: str,
        sport: str = SPORT_CRICKET,
        played_at: datetime | None = None,
    ) -> MatchResultResponse:
        """
        Apply a settled result to both entities' ratings.

        Args:
            team1_id: Team 1 identifier
            team2_id: Team 2 identifier
            context: Rating context (match format)
            outcome: 'team1', 'team2' or 'draw'
            sport: Sport
            played_at: Match date (defaults to now)

        Returns:
            MatchResultResponse with both updated ratings and the pre-match expectation

        Raises:
            InvalidMatchResultError: same entity on both sides or unknown outcome
        """
        if team1_id == team2_id:
            raise InvalidMatchResultError(f"'{team1_id}' cannot play itself")
        if outcome not in OUTCOME_SCORES:
            raise InvalidMatchResultError(f"Unknown outcome: {outcome}")

        played_at = played_at or datetime.now(timezone.utc)
        k = self.k_factors.get(context, ELO_K_FACTORS["odi"])
        score1 = OUTCOME_SCORES[outcome]

        with self._lock:
            r1 = self._ensure_locked(team1_id, sport, context)
            r2 = self._ensure_locked(team2_id, sport, context)

            expected1 = elo_expected_score(r1.elo_rating, r2.elo_rating)
            form_expected1 = elo_expected_score(r1.form_rating, r2.form_rating)

            new_r1 = _apply(r1, k, score1 - expected1, score1 - form_expected1, score1, played_at)
            new_r2 = _apply(
                r2, k, expected1 - score1, form_expected1 - score1, 1.0 - score1, played_at
            )
            self._ratings[(team1_id, sport, context)] = new_r1
            self._ratings[(team2_id, sport, context)] = new_r2

        logger.info(
            f"Result applied ({context}): {team1_id} {r1.elo_rating:.1f}->{new_r1.elo_rating:.1f}, "
            f"{team2_id} {r2.elo_rating:.1f}->{new_r2.elo_rating:.1f}, outcome={outcome}"
        )
        return MatchResultResponse(team1=new_r1, team2=new_r2, expected_team1_score=expected1)


def _apply(
    rating: EntityRating,
    k: float,
    surprise: float,
    form_surprise: float,
    score: float,
    played_at: datetime,
) -> EntityRating:
    """Return a superseding rating after one match."""
    wins = rating.wins + (1 if score == 1.0 else 0)
    losses = rating.losses + (1 if score == 0.0 else 0)
    draws = rating.draws + (1 if score == 0.5 else 0)
    matches = rating.matches_played + 1
    elo = rating.elo_rating + k * surprise

    update = {
        "elo_rating": elo,
        "form_rating": rating.form_rating + k * FORM_K_MULTIPLIER * form_surprise,
        "wins": wins,
        "losses": losses,
        "draws": draws,
        "matches_played": matches,
        "win_percentage": wins / matches * 100,
        "last_match_date": played_at,
        "updated_at": datetime.now(timezone.utc),
    }
    if elo > rating.peak_rating:
        update["peak_rating"] = elo
        update["peak_rating_date"] = played_at

    return rating.model_copy(update=update)
