"""
Engine Profiles

Static per-engine calibration: display name, model version, baseline
confidence and per-format accuracy estimate. Accuracy figures are
estimates, not measured values; recalibrate them here.
"""

from dataclasses import dataclass, field

from cricket_predictor.config import (
    ENGINE_ACCURACY,
    ENGINE_BALANCED,
    ENGINE_CONFIDENCE,
    ENGINE_FALLBACK,
    ENGINE_FAST,
)


@dataclass(frozen=True)
class EngineProfile:
    name: str
    display_name: str
    model_version: str
    confidence: float
    accuracy_by_format: dict[str, float]
    key_factors: tuple[str, ...] = ()
    risk_factors: tuple[str, ...] = ()
    format_risk_factors: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def accuracy(self, format: str) -> float:
        return self.accuracy_by_format.get(format, min(self.accuracy_by_format.values()))

    def risks_for(self, format: str) -> list[str]:
        return list(self.risk_factors) + list(self.format_risk_factors.get(format, ()))


DEFAULT_ENGINE_PROFILES: dict[str, EngineProfile] = {
    ENGINE_FAST: EngineProfile(
        name=ENGINE_FAST,
        display_name="Elo Rating System",
        model_version="fast-v1.0",
        confidence=ENGINE_CONFIDENCE[ENGINE_FAST],
        accuracy_by_format=ENGINE_ACCURACY[ENGINE_FAST],
        key_factors=("Team strength (Elo ratings)", "Historical performance"),
        format_risk_factors={"test": ("Weather dependency", "Match duration")},
    ),
    ENGINE_BALANCED: EngineProfile(
        name=ENGINE_BALANCED,
        display_name="Elo + ML Ensemble",
        model_version="balanced-v1.0",
        confidence=ENGINE_CONFIDENCE[ENGINE_BALANCED],
        accuracy_by_format=ENGINE_ACCURACY[ENGINE_BALANCED],
        key_factors=("Team strength", "Venue factors", "Recent form", "Head-to-head record"),
    ),
    ENGINE_FALLBACK: EngineProfile(
        name=ENGINE_FALLBACK,
        display_name="Basic Fallback",
        model_version="fallback-v1.0",
        confidence=ENGINE_CONFIDENCE[ENGINE_FALLBACK],
        accuracy_by_format=ENGINE_ACCURACY[ENGINE_FALLBACK],
        key_factors=("Basic statistical analysis",),
        risk_factors=("Limited data available", "Fallback prediction"),
    ),
}
