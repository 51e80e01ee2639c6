"""
Rating-related Pydantic schemas
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, model_validator

from cricket_predictor.api.schemas.prediction import CamelModel, MatchFormat
from cricket_predictor.config import ELO_INITIAL_RATING, GLICKO_INITIAL_VOLATILITY


class EntityRating(CamelModel):
    """Skill rating of one entity in one (sport, context) scope"""

    entity_id: str = Field(..., min_length=1, description="Team or player identifier")
    sport: str = Field(..., description="Sport, e.g. 'cricket'")
    context: str = Field(..., description="Format or surface, e.g. 't20'")
    elo_rating: float = Field(ELO_INITIAL_RATING, description="Elo rating")
    glicko_rating: float = Field(ELO_INITIAL_RATING, description="Glicko-2 rating")
    volatility: float = Field(GLICKO_INITIAL_VOLATILITY, ge=0.0, description="Glicko-2 volatility")
    matches_played: int = Field(0, ge=0)
    wins: int = Field(0, ge=0)
    losses: int = Field(0, ge=0)
    draws: int = Field(0, ge=0)
    win_percentage: float = Field(0.0, ge=0.0, le=100.0)
    form_rating: float = Field(ELO_INITIAL_RATING, description="Recency-weighted rating")
    peak_rating: float = Field(ELO_INITIAL_RATING)
    peak_rating_date: Optional[datetime] = None
    last_match_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_record(self):
        if self.matches_played != self.wins + self.losses + self.draws:
            raise ValueError("matches_played must equal wins + losses + draws")
        return self


class MatchResultRequest(CamelModel):
    """A settled match result to apply to the ratings"""

    team1_id: str = Field(..., min_length=1)
    team2_id: str = Field(..., min_length=1)
    format: MatchFormat
    outcome: Literal["team1", "team2", "draw"] = Field(..., description="Winner or draw")
    played_at: Optional[datetime] = Field(None, description="Match date (defaults to now)")


class MatchResultResponse(CamelModel):
    """Ratings after a settled result was applied"""

    team1: EntityRating
    team2: EntityRating
    expected_team1_score: float = Field(..., ge=0.0, le=1.0)
