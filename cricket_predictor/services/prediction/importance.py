"""
Match importance detection for smart mode.
"""

from typing import Callable, Iterable

from cricket_predictor.api.schemas.prediction import PredictionInput
from cricket_predictor.config import IMPORTANCE_KEYWORDS

ImportancePredicate = Callable[[PredictionInput], bool]


class KeywordImportance:
    """
    Flags a match as important when its tournament or series context contains
    any of the keywords (case-insensitive substring match).
    """

    def __init__(self, keywords: Iterable[str] = IMPORTANCE_KEYWORDS):
        self.keywords = tuple(k.lower() for k in keywords if k)

    def __call__(self, input: PredictionInput) -> bool:
        text = " ".join(t for t in (input.tournament, input.series_context) if t).lower()
        return any(k in text for k in self.keywords)
