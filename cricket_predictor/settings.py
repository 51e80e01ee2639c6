"""
Pydantic Settings for Environment Variable Validation

Validates environment variables at startup and provides type-safe access.
Uses pydantic-settings for automatic .env file loading and validation.

Usage:
    from cricket_predictor.settings import settings

    ttl = settings.cache_ttl_seconds
    capacity = settings.cache_capacity
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cricket_predictor.config import (
    API_DEFAULT_HOST,
    API_DEFAULT_PORT,
    CACHE_CAPACITY,
    CACHE_EVICTION_POLICIES,
    CACHE_TTL_SECONDS,
    DEFAULT_TEST_DRAW_PROBABILITY,
    IMPORTANCE_KEYWORDS,
    PREDICTION_MODES,
    SPORT_CRICKET,
)


class Settings(BaseSettings):
    """Application settings with environment variable validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Prediction Cache
    # =========================================================================
    cache_backend: str = Field(default="memory", description="Cache backend: 'memory' or 'redis'")
    cache_ttl_seconds: int = Field(default=CACHE_TTL_SECONDS, ge=1, description="Entry TTL (s)")
    cache_capacity: int = Field(default=CACHE_CAPACITY, ge=1, description="Maximum cached entries")
    cache_eviction: str = Field(default="fifo", description="Eviction policy: 'fifo' or 'lru'")

    @field_validator("cache_backend")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        allowed = {"memory", "redis"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"cache_backend must be one of {allowed}")
        return v_lower

    @field_validator("cache_eviction")
    @classmethod
    def validate_cache_eviction(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in CACHE_EVICTION_POLICIES:
            raise ValueError(f"cache_eviction must be one of {set(CACHE_EVICTION_POLICIES)}")
        return v_lower

    # =========================================================================
    # Redis (shared cache backend)
    # =========================================================================
    redis_url: str = Field(default="redis://localhost:6379", description="Redis connection URL")
    redis_key_prefix: str = Field(default="prediction", description="Key prefix for cache entries")

    # =========================================================================
    # Prediction Engine
    # =========================================================================
    sport: str = Field(default=SPORT_CRICKET, description="Sport whose ratings are consulted")
    auto_create_ratings: bool = Field(
        default=False, description="Create a 1500 rating for entities seen for the first time"
    )
    test_draw_probability: float = Field(
        default=DEFAULT_TEST_DRAW_PROBABILITY,
        ge=0.0,
        lt=1.0,
        description="Draw mass reserved for test matches",
    )
    default_mode: str = Field(default="smart", description="Mode used when none is requested")
    importance_keywords: list[str] = Field(
        default_factory=lambda: list(IMPORTANCE_KEYWORDS),
        description="Case-insensitive markers that route smart mode to the balanced tier",
    )

    @field_validator("default_mode")
    @classmethod
    def validate_default_mode(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in PREDICTION_MODES:
            raise ValueError(f"default_mode must be one of {set(PREDICTION_MODES)}")
        return v_lower

    # =========================================================================
    # API Settings
    # =========================================================================
    api_host: str = Field(default=API_DEFAULT_HOST, description="API host")
    api_port: int = Field(default=API_DEFAULT_PORT, ge=1, le=65535, description="API port")

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format: 'json' or 'text'")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = {"json", "text"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"log_format must be one of {allowed}")
        return v_lower

    # =========================================================================
    # Timezone
    # =========================================================================
    tz: str = Field(default="UTC", description="Timezone for log timestamps")

    # =========================================================================
    # Helper Properties
    # =========================================================================
    @property
    def uses_redis(self) -> bool:
        """Check if the shared Redis cache backend is selected."""
        return self.cache_backend == "redis"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
