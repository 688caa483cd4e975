"""Configuration models for the calculator application.

This module provides Pydantic models for every configuration aspect of the
calculator and currency converter, including validation, type safety, and
environment variable management.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from .validators import ConfigurationValidators

DEFAULT_SUPPORTED_CURRENCIES = [
    "USD",
    "EUR",
    "GBP",
    "JPY",
    "CAD",
    "AUD",
    "CHF",
    "CNY",
    "INR",
    "RUB",
    "IDR",
]
DEFAULT_MAJOR_CURRENCIES = ["USD", "EUR", "GBP", "JPY", "CAD", "AUD"]


class CurrencyApiConfig(BaseModel):
    """Exchange-rate API configuration."""

    base_url: str = Field(
        default="https://api.freecurrencyapi.com/v1/latest",
        description="Latest-rates endpoint URL",
    )
    api_key: str = Field(default="", description="API key sent as 'apikey'")
    timeout: float = Field(
        default=10.0, ge=1.0, le=120.0, description="Request timeout in seconds"
    )
    max_retries: int = Field(
        default=2, ge=0, le=10, description="Maximum number of retry attempts"
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0.0,
        le=10.0,
        description="Initial delay between retries in seconds",
    )
    backoff_factor: float = Field(
        default=2.0,
        ge=1.0,
        le=5.0,
        description="Exponential backoff factor for retries",
    )
    circuit_breaker_threshold: int = Field(
        default=5, ge=1, le=20, description="Consecutive failures before opening"
    )
    circuit_breaker_timeout: int = Field(
        default=60, ge=1, le=600, description="Seconds before a half-open retry"
    )
    supported_currencies: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SUPPORTED_CURRENCIES),
        description="Currencies requested from the API and offered to the user",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate API base URL format."""
        return ConfigurationValidators.validate_url(v)

    @field_validator("supported_currencies", mode="before")
    @classmethod
    def validate_supported_currencies(cls, v: Any) -> list[str]:
        """Normalize the supported currency list."""
        return ConfigurationValidators.validate_currency_list(v)


class RateCacheConfig(BaseModel):
    """Exchange-rate cache and persistence configuration."""

    expiration_minutes: int = Field(
        default=60, ge=1, le=10080, description="Age after which a table is stale"
    )
    rates_file_path: str = Field(
        default="exchange_rates.json", description="Persisted rate table file"
    )
    enable_persistent_storage: bool = Field(
        default=True, description="Write rates to disk after every refresh"
    )
    load_rates_at_startup: bool = Field(
        default=True, description="Load the persisted rate file during warm-up"
    )
    major_currencies: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MAJOR_CURRENCIES),
        description="Base currencies fetched in the background at startup",
    )
    api_call_delay_ms: int = Field(
        default=100, ge=0, le=10000, description="Delay between warm-up requests"
    )
    min_rate_entries: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Responses smaller than this are backfilled from the cache",
    )
    primary_reference_currency: str = Field(
        default="USD", description="First hub currency for cross rates"
    )
    secondary_reference_currency: str = Field(
        default="EUR", description="Second hub currency for cross rates"
    )

    @field_validator("rates_file_path")
    @classmethod
    def validate_rates_file_path(cls, v: str) -> str:
        """Validate rate file path."""
        return ConfigurationValidators.validate_file_path(v)

    @field_validator("major_currencies", mode="before")
    @classmethod
    def validate_major_currencies(cls, v: Any) -> list[str]:
        """Normalize the major currency list."""
        return ConfigurationValidators.validate_currency_list(v)

    @field_validator("primary_reference_currency", "secondary_reference_currency")
    @classmethod
    def validate_reference_currency(cls, v: str) -> str:
        """Validate reference currency codes."""
        return ConfigurationValidators.validate_currency_code(v)

    @property
    def api_call_delay(self) -> float:
        """Delay between warm-up requests in seconds."""
        return self.api_call_delay_ms / 1000

    @property
    def reference_currencies(self) -> list[str]:
        """Reference currencies in the order they are tried."""
        return [self.primary_reference_currency, self.secondary_reference_currency]


class DisplayConfig(BaseModel):
    """User-facing conversion behaviour."""

    default_from_currency: str = Field(default="USD", description="Initial source")
    default_to_currency: str = Field(default="EUR", description="Initial target")
    decimal_places: int = Field(
        default=5, ge=0, le=10, description="Decimal places for converted amounts"
    )
    real_time_conversion: bool = Field(
        default=True, description="Convert on every amount or currency change"
    )
    amount_synchronization: bool = Field(
        default=True,
        description="Copy the calculator value into the converter on panel open",
    )

    @field_validator("default_from_currency", "default_to_currency")
    @classmethod
    def validate_default_currency(cls, v: str) -> str:
        """Validate default currency codes."""
        return ConfigurationValidators.validate_currency_code(v)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="text", description="Log format (json or text)")
    file_enabled: bool = Field(default=False, description="Enable file logging")
    file_path: str = Field(default="logs/calcfx.log", description="Log file path")
    max_file_size: int = Field(
        default=10485760,  # 10MB
        ge=1048576,  # 1MB
        le=104857600,  # 100MB
        description="Maximum log file size in bytes",
    )
    backup_count: int = Field(
        default=5, ge=1, le=20, description="Number of log file backups to keep"
    )

    @field_validator("file_path")
    @classmethod
    def validate_log_file_path(cls, v: str) -> str:
        """Validate log file path."""
        return ConfigurationValidators.validate_file_path(v)

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = {"json", "text"}
        v_lower = v.lower()
        if v_lower not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return v_lower


class ApplicationConfig(BaseModel):
    """General application configuration."""

    name: str = Field(default="Stylish Calculator", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="production",
        description="Environment (development, staging, production)",
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_envs = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of {valid_envs}")
        return v_lower


class Settings(BaseSettings):
    """Main application settings combining all configuration models."""

    currency_api: CurrencyApiConfig = Field(default_factory=CurrencyApiConfig)
    rate_cache: RateCacheConfig = Field(default_factory=RateCacheConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    application: ApplicationConfig = Field(default_factory=ApplicationConfig)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_reference_currencies_differ(self) -> Settings:
        """Reference currencies must be two different hubs."""
        cache = self.rate_cache
        if cache.primary_reference_currency == cache.secondary_reference_currency:
            raise ValueError("Primary and secondary reference currencies must differ")
        return self

    @property
    def supported_currencies(self) -> list[str]:
        """Get the supported currency codes."""
        return self.currency_api.supported_currencies

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.application.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.application.environment == "production"
