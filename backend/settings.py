"""
Centralized settings configuration using Pydantic BaseSettings.

All environment variables are defined here with types, defaults, and validation.
Use get_settings() for dependency injection compatibility in FastAPI.

Usage:
    from backend.settings import get_settings, Settings

    # In FastAPI endpoints (dependency injection)
    @app.get("/")
    def read_root(settings: Settings = Depends(get_settings)):
        return {"environment": settings.environment}

    # Direct access (module-level)
    settings = get_settings()
    print(settings.cache_max_entries)
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production, test",
    )
    service_name: str = Field(
        default="workout-insights-api",
        description="Service name reported by health endpoints",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )

    # -------------------------------------------------------------------------
    # Analysis Engine - Cache & History
    # -------------------------------------------------------------------------
    cache_max_entries: int = Field(
        default=1000,
        ge=1,
        description="Maximum analyses kept in the result cache",
    )
    session_history_max: int = Field(
        default=100,
        ge=1,
        description="Maximum interactions kept in session history",
    )
    error_history_max: int = Field(
        default=100,
        ge=1,
        description="Maximum errors kept by the error handler",
    )

    # -------------------------------------------------------------------------
    # Analysis Engine - Validation
    # -------------------------------------------------------------------------
    enable_validation: bool = Field(
        default=False,
        description="Validate every produced analysis",
    )
    strict_validation: bool = Field(
        default=False,
        description="Record failed validations as errors in health metrics",
    )

    # -------------------------------------------------------------------------
    # Analysis Engine - External Strategy
    # -------------------------------------------------------------------------
    external_strategy_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Timeout for a single external strategy call",
    )
    external_strategy_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per external strategy call, including the first",
    )
    external_strategy_backoff_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Base wait for exponential backoff between attempts",
    )

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------
    cors_allowed_origins: str = Field(
        default="",
        description="Comma-separated list of extra CORS origins",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    # -------------------------------------------------------------------------
    # Observability - Sentry
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level '{v}'. Must be one of: {valid_levels}")
        return v.upper()

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
