"""
Custom exception classes

Defines the exceptions used across the prediction engine so that every tier
reports failures through the same hierarchy.
"""


class CricketPredictorError(Exception):
    """Base exception for the prediction engine"""
    pass


# =====================================
# Prediction errors
# =====================================
class PredictionError(CricketPredictorError):
    """A prediction tier could not produce a result"""
    pass


class MissingRatingError(PredictionError):
    """An entity has no rating in the requested context"""
    def __init__(self, entity_id: str, context: str):
        self.entity_id = entity_id
        self.context = context
        super().__init__(f"No rating for '{entity_id}' in context '{context}'")


class EnhancementUnavailableError(PredictionError):
    """Feature provider failed or returned invalid data"""
    pass


class InvalidProbabilityError(PredictionError):
    """Computed distribution violates the probability invariants"""
    pass


# =====================================
# Rating errors
# =====================================
class RatingError(CricketPredictorError):
    """Rating store errors"""
    pass


class InvalidMatchResultError(RatingError):
    """A settled result cannot be applied to the ratings"""
    pass


# =====================================
# Cache errors
# =====================================
class CacheError(CricketPredictorError):
    """Cache backend infrastructure failure"""
    pass

