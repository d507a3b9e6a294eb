"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated retry defaults from environment variables.
Supports .env files and nested configuration.

Example:
    >>> from faultcase.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.max_backoff
    30.0
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # FAULTCASE_RETRY_RETRY_COUNT=5
    # FAULTCASE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Any, Literal

from pydantic import Field, ValidationError, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from faultcase.foundation.errors import ConfigurationError

# Finite, non-negative seconds
Duration = Annotated[float, Field(ge=0, allow_inf_nan=False)]


class _Settings(BaseSettings):
    """Settings base surfacing invalid values as ConfigurationError."""

    def __init__(self, **values: Any) -> None:
        try:
            super().__init__(**values)
        except ValidationError as e:
            raise ConfigurationError.from_validation_error(e, title=type(self).__name__) from e


class RetrySettings(_Settings):
    """Default retry configuration shared by the built-in strategies."""

    model_config = SettingsConfigDict(
        env_prefix="FAULTCASE_RETRY_",
        extra="ignore",
    )

    retry_count: Annotated[int, Field(ge=0)] = 10
    min_backoff: Duration = Field(default=1.0, description="Minimum exponential backoff in seconds")
    max_backoff: Duration = Field(default=30.0, description="Maximum exponential backoff in seconds")
    delta_backoff: Duration = Field(default=10.0, description="Exponential jitter delta in seconds")
    retry_interval: Duration = Field(default=1.0, description="Fixed retry interval in seconds")
    increment: Duration = Field(default=1.0, description="Incremental step in seconds")
    first_fast_retry: bool = False

    @model_validator(mode="after")
    def _check_backoff_bounds(self) -> RetrySettings:
        if self.min_backoff >= self.max_backoff:
            raise ValueError("min_backoff must be less than max_backoff")
        return self


class LoggingSettings(_Settings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FAULTCASE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"
    include_timestamps: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class FaultcaseSettings(_Settings):
    """Root settings for faultcase.

    Loads configuration from environment variables with FAULTCASE_ prefix.
    Supports nested configuration and .env files.

    Example environment variables:
        FAULTCASE_DEBUG=true
        FAULTCASE_RETRY_RETRY_COUNT=3
        FAULTCASE_RETRY_MAX_BACKOFF=60
        FAULTCASE_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="FAULTCASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Enable debug mode")
    environment: Literal["development", "staging", "production"] = "development"

    # Nested settings (loaded with FAULTCASE_RETRY_, FAULTCASE_LOG_)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        """Normalize environment name to lowercase."""
        return v.lower() if isinstance(v, str) else v

    @computed_field
    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> FaultcaseSettings:
    """Get the global settings instance (cached).

    Raises:
        ConfigurationError: The environment holds invalid values

    Example:
        >>> settings = get_settings()
        >>> settings.debug
        False
    """
    return FaultcaseSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
