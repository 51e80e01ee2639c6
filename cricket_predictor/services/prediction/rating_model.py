"""
Rating Model Module

Converts per-entity Elo ratings into a head-to-head outcome distribution.
The longest format reserves a small draw mass and rescales the win
probabilities around it.
"""

import logging

from cricket_predictor.api.schemas.prediction import WinProbabilities
from cricket_predictor.api.schemas.rating import EntityRating
from cricket_predictor.config import (
    DEFAULT_TEST_DRAW_PROBABILITY,
    ELO_SCALE,
    LONGEST_FORMAT,
    SPORT_CRICKET,
)
from cricket_predictor.exceptions import MissingRatingError

logger = logging.getLogger(__name__)


# 10**300 is still a finite float
_MAX_EXPONENT = 300.0


def elo_expected_score(rating_a: float, rating_b: float, scale: float = ELO_SCALE) -> float:
    """P(a beats b) = 1 / (1 + 10^((Rb - Ra) / scale))"""
    exponent = max(-_MAX_EXPONENT, min(_MAX_EXPONENT, (rating_b - rating_a) / scale))
    return 1.0 / (1.0 + 10 ** exponent)


class EloRatingModel:
    """
    Elo-based win probability.

    Args:
        store: Rating lookup (get_rating / ensure_rating)
        sport: Sport whose ratings are consulted
        draw_probabilities: Reserved draw mass per format; formats not listed get none
        auto_create: Lazily create a 1500 rating for unseen entities instead of failing
    """

    def __init__(
        self,
        store,
        sport: str = SPORT_CRICKET,
        draw_probabilities: dict[str, float] | None = None,
        auto_create: bool = False,
    ):
        self.store = store
        self.sport = sport
        self.draw_probabilities = (
            dict(draw_probabilities)
            if draw_probabilities is not None
            else {LONGEST_FORMAT: DEFAULT_TEST_DRAW_PROBABILITY}
        )
        self.auto_create = auto_create

    async def _lookup(self, entity_id: str, context: str) -> EntityRating:
        if self.auto_create:
            return await self.store.ensure_rating(entity_id, self.sport, context)

        rating = await self.store.get_rating(entity_id, self.sport, context)
        if rating is None:
            raise MissingRatingError(entity_id, context)
        return rating

    async def win_probability(self, team1_id: str, team2_id: str, format: str) -> WinProbabilities:
        """
        Compute the outcome distribution for team1 vs team2.

        Args:
            team1_id: Team 1 identifier
            team2_id: Team 2 identifier
            format: Match format (rating context)

        Returns:
            WinProbabilities summing to 1

        Raises:
            MissingRatingError: either team has no rating in this context
        """
        r1 = await self._lookup(team1_id, format)
        r2 = await self._lookup(team2_id, format)

        p1 = elo_expected_score(r1.elo_rating, r2.elo_rating)
        draw = self.draw_probabilities.get(format, 0.0)

        logger.debug(
            f"Elo {team1_id}={r1.elo_rating:.1f} vs {team2_id}={r2.elo_rating:.1f} "
            f"({format}): p1={p1:.4f}, draw={draw:.3f}"
        )

        return WinProbabilities(
            team1_win_prob=p1 * (1.0 - draw),
            team2_win_prob=(1.0 - p1) * (1.0 - draw),
            draw_prob=draw,
        )
