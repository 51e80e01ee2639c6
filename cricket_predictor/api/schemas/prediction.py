"""
Prediction-related Pydantic schemas

Field names serialise in camelCase (team1WinProb, processingTimeMs, ...) so the
wire format round-trips unchanged for existing clients.
"""

import math
from datetime import datetime
from typing import Literal, Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from cricket_predictor.config import PROBABILITY_SUM_MAX, PROBABILITY_SUM_MIN

MatchFormat = Literal["t20", "odi", "test"]


class CamelModel(BaseModel):
    """Base model serialising with camelCase aliases"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
    )


class PredictionInput(CamelModel):
    """A single match prediction request (immutable)"""

    model_config = ConfigDict(frozen=True)

    team1_id: str = Field(..., min_length=1, description="Team 1 identifier")
    team2_id: str = Field(..., min_length=1, description="Team 2 identifier")
    team1_name: Optional[str] = Field(None, description="Team 1 display name")
    team2_name: Optional[str] = Field(None, description="Team 2 display name")
    venue: Optional[str] = Field(None, description="Venue name")
    format: MatchFormat = Field(..., description="Match format (t20/odi/test)")
    match_date: Optional[datetime] = Field(None, description="Scheduled start")
    tournament: Optional[str] = Field(None, description="Tournament name")
    series_context: Optional[str] = Field(None, description="Series stage, e.g. 'Semi-final'")

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("venue", mode="before")
    @classmethod
    def normalize_venue(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v


class WinProbabilities(CamelModel):
    """Head-to-head outcome distribution"""

    team1_win_prob: float = Field(..., ge=0.0, le=1.0)
    team2_win_prob: float = Field(..., ge=0.0, le=1.0)
    draw_prob: float = Field(0.0, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_total(self):
        total = self.team1_win_prob + self.team2_win_prob + self.draw_prob
        if not PROBABILITY_SUM_MIN <= total <= PROBABILITY_SUM_MAX:
            raise ValueError(f"probabilities sum to {total:.4f}")
        return self


class MatchFeatures(CamelModel):
    """Contextual signals supplied by a feature provider"""

    team1_form: float = Field(0.0, description="Team 1 form delta (form rating - elo rating)")
    team2_form: float = Field(0.0, description="Team 2 form delta")
    venue_advantage: float = Field(
        0.0, ge=-1.0, le=1.0, description="Home venue edge, positive favours team 1"
    )
    h2h_team1_wins: int = Field(0, ge=0, description="Head-to-head wins for team 1")
    h2h_team2_wins: int = Field(0, ge=0, description="Head-to-head wins for team 2")

    @property
    def h2h_matches(self) -> int:
        return self.h2h_team1_wins + self.h2h_team2_wins


class EnhancedPrediction(CamelModel):
    """Feature ensemble output"""

    probabilities: WinProbabilities
    confidence_level: float = Field(..., ge=0.0, le=1.0)
    model_version: str
    evidence_strength: float = Field(0.0, ge=0.0, le=1.0)
    key_factors: List[str] = Field(default_factory=list)


class PredictionResult(CamelModel):
    """Prediction returned to callers of every tier"""

    team1_win_prob: float = Field(..., ge=0.0, le=1.0, description="Team 1 win probability")
    team2_win_prob: float = Field(..., ge=0.0, le=1.0, description="Team 2 win probability")
    draw_prob: float = Field(0.0, ge=0.0, le=1.0, description="Draw probability (test only)")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence (0.0-1.0)")
    key_factors: List[str] = Field(default_factory=list, description="Main drivers")
    risk_factors: List[str] = Field(default_factory=list, description="Known caveats")
    model_version: str = Field(..., description="Model version tag")
    engine_used: str = Field(..., description="Engine display name")
    accuracy: float = Field(..., ge=0.0, le=100.0, description="Static accuracy estimate (%)")
    processing_time_ms: float = Field(..., ge=0.0, description="Computation time (ms)")
    from_cache: Optional[bool] = Field(None, description="Served from the prediction cache")

    @model_validator(mode="after")
    def check_total(self):
        total = self.team1_win_prob + self.team2_win_prob + self.draw_prob
        if not math.isfinite(total) or not PROBABILITY_SUM_MIN <= total <= PROBABILITY_SUM_MAX:
            raise ValueError(f"probabilities sum to {total:.4f}")
        return self

    @property
    def probabilities(self) -> WinProbabilities:
        return WinProbabilities(
            team1_win_prob=self.team1_win_prob,
            team2_win_prob=self.team2_win_prob,
            draw_prob=self.draw_prob,
        )
