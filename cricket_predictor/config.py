"""
System-wide configuration constants

Collects the magic numbers and hard-coded defaults of the prediction engine
in one place. Runtime-tunable values are exposed through settings.py; the
constants here are their defaults.
"""

from typing import Final

# =====================================
# Match formats / rating contexts
# =====================================
SPORT_CRICKET: Final[str] = "cricket"
MATCH_FORMATS: Final[tuple[str, ...]] = ("t20", "odi", "test")
LONGEST_FORMAT: Final[str] = "test"

# =====================================
# Elo settings
# =====================================
ELO_INITIAL_RATING: Final[float] = 1500.0
ELO_SCALE: Final[float] = 400.0
GLICKO_INITIAL_VOLATILITY: Final[float] = 0.06

# K-factor per format (shorter formats are noisier, ratings move faster)
ELO_K_FACTORS: Final[dict[str, float]] = {
    "t20": 32.0,
    "odi": 28.0,
    "test": 24.0,
}
FORM_K_MULTIPLIER: Final[float] = 2.0  # form_rating reacts twice as fast as elo

# Reserved draw mass for the longest format
DEFAULT_TEST_DRAW_PROBABILITY: Final[float] = 0.02

# =====================================
# Probability invariants
# =====================================
PROBABILITY_SUM_MIN: Final[float] = 0.99
PROBABILITY_SUM_MAX: Final[float] = 1.01

# =====================================
# Prediction cache
# =====================================
CACHE_TTL_SECONDS: Final[int] = 300  # 5 minutes
CACHE_CAPACITY: Final[int] = 100
CACHE_EVICTION_POLICIES: Final[tuple[str, ...]] = ("fifo", "lru")

# =====================================
# Engines
# =====================================
ENGINE_FAST: Final[str] = "fast"
ENGINE_BALANCED: Final[str] = "balanced"
ENGINE_FALLBACK: Final[str] = "fallback"

PREDICTION_MODES: Final[tuple[str, ...]] = ("fast", "balanced", "smart")
TIME_CONSTRAINTS: Final[tuple[str, ...]] = ("fast", "balanced", "accurate")

# Baseline (not measured) accuracy estimates per engine and format, in percent
ENGINE_ACCURACY: Final[dict[str, dict[str, float]]] = {
    ENGINE_FAST: {"t20": 78.0, "odi": 75.0, "test": 72.0},
    ENGINE_BALANCED: {"t20": 82.0, "odi": 79.0, "test": 75.0},
    ENGINE_FALLBACK: {"t20": 65.0, "odi": 65.0, "test": 65.0},
}

ENGINE_CONFIDENCE: Final[dict[str, float]] = {
    ENGINE_FAST: 0.75,
    ENGINE_BALANCED: 0.82,
    ENGINE_FALLBACK: 0.60,
}

# Static distribution used when every computational tier fails
FALLBACK_PROBABILITIES: Final[tuple[float, float, float]] = (0.52, 0.46, 0.02)

# =====================================
# Feature ensemble
# =====================================
# Log-odds weights for each contextual signal
ENSEMBLE_FORM_WEIGHT: Final[float] = 0.004  # per form-rating point of difference
ENSEMBLE_VENUE_WEIGHT: Final[float] = 0.25  # home venue shift
ENSEMBLE_H2H_WEIGHT: Final[float] = 0.8  # per unit of (h2h share - 0.5)
ENSEMBLE_MAX_SHIFT: Final[float] = 0.75  # clamp on total log-odds shift

# Evidence below this strength does not lift confidence above the fast baseline
ENSEMBLE_WEAK_EVIDENCE: Final[float] = 0.2
H2H_FULL_EVIDENCE_MATCHES: Final[int] = 10

# =====================================
# Smart mode
# =====================================
IMPORTANCE_KEYWORDS: Final[tuple[str, ...]] = ("world", "final", "semi")

# =====================================
# Logging
# =====================================
LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SERVICE_NAME: Final[str] = "cricket-predictor"

# =====================================
# API
# =====================================
API_DEFAULT_HOST: Final[str] = "0.0.0.0"
API_DEFAULT_PORT: Final[int] = 8000
API_VERSION: Final[str] = "1.0.0"
