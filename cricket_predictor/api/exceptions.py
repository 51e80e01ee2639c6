"""
API custom exception classes
"""

from fastapi import HTTPException, status

from cricket_predictor.api.schemas.common import ErrorDetail


class RatingNotFoundException(HTTPException):
    """Raised when an entity has no rating in the requested context"""

    def __init__(self, entity_id: str, context: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ErrorDetail(
                code="RATING_NOT_FOUND",
                message="No rating found for the requested entity",
                details={"entity_id": entity_id, "context": context},
            ).model_dump(),
        )


class InvalidRequestException(HTTPException):
    """Raised for requests that cannot be applied"""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=ErrorDetail(code="INVALID_REQUEST", message=message, details={}).model_dump(),
        )


class CacheUnavailableException(HTTPException):
    """Raised when the cache backend fails"""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=ErrorDetail(
                code="CACHE_UNAVAILABLE",
                message=f"Prediction cache is unavailable: {message}",
                details={},
            ).model_dump(),
        )
