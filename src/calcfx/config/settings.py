"""Application settings and configuration.

This module provides the validated ``Settings`` object used across the
application, plus loading from and saving to the JSON configuration file.
"""

import json
import warnings
from functools import lru_cache
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from .models import (
    ApplicationConfig,
    CurrencyApiConfig,
    DisplayConfig,
    LoggingConfig,
    RateCacheConfig,
    Settings as BaseSettings,
)
from .validators import BusinessRuleValidators, ConfigurationValidators

CONFIG_FILE_NAME = "app_config.json"

logger = structlog.get_logger(__name__)


class Settings(BaseSettings):
    """Application settings with business rule validation."""

    def __init__(self, **data: Any) -> None:
        """Initialize settings with validation."""
        super().__init__(**data)
        self._validate_business_rules()

    def _validate_business_rules(self) -> None:
        """Validate business rules and consistency."""
        try:
            BusinessRuleValidators.validate_currency_consistency(
                supported=self.supported_currencies,
                major=self.rate_cache.major_currencies,
                references=self.rate_cache.reference_currencies,
                default_pair=(
                    self.display.default_from_currency,
                    self.display.default_to_currency,
                ),
            )
            BusinessRuleValidators.validate_environment_consistency(
                self.application.environment, self.application.debug, self.logging.level
            )
        except ValueError as e:
            warnings.warn(
                f"Business rule validation warning: {e}", UserWarning, stacklevel=2
            )

    @property
    def api_key(self) -> str:
        """Get the exchange-rate API key."""
        return self.currency_api.api_key

    @property
    def log_level(self) -> str:
        """Get log level."""
        return self.logging.level

    @property
    def rates_file(self) -> Path:
        """Get the persisted rate file path."""
        return Path(self.rate_cache.rates_file_path)


def default_settings() -> Settings:
    """Build settings from declared defaults only.

    Every section is constructed explicitly so that neither the environment
    nor a ``.env`` file can leak into the result.
    """
    return Settings(
        _env_file=None,
        currency_api=CurrencyApiConfig(),
        rate_cache=RateCacheConfig(),
        display=DisplayConfig(),
        logging=LoggingConfig(),
        application=ApplicationConfig(),
    )


def load_settings(path: str | Path = CONFIG_FILE_NAME) -> Settings:
    """Load settings from a JSON configuration file.

    A missing file is created from defaults. A file that cannot be read or
    does not validate is logged and defaults are used instead.

    Args:
        path: Configuration file path

    Returns:
        Loaded settings
    """
    config_path = Path(path)

    if config_path.exists():
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("Configuration root must be a JSON object")
            return Settings(**data)
        except (OSError, ValueError, ValidationError) as e:
            logger.error(
                "Failed to load configuration", path=str(config_path), error=str(e)
            )
            return default_settings()

    settings = default_settings()
    save_settings(settings, config_path)
    return settings


def save_settings(settings: Settings, path: str | Path = CONFIG_FILE_NAME) -> bool:
    """Write settings to a JSON configuration file.

    Args:
        settings: Settings to save
        path: Configuration file path

    Returns:
        True if the file was written
    """
    config_path = Path(path)
    try:
        if config_path.parent != Path("."):
            config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
        return True
    except OSError as e:
        logger.error("Failed to save configuration", path=str(config_path), error=str(e))
        return False


@lru_cache
def get_settings() -> Settings:
    """Get application settings (cached)."""
    return Settings()


__all__ = [
    "ApplicationConfig",
    "BusinessRuleValidators",
    "CONFIG_FILE_NAME",
    "ConfigurationValidators",
    "CurrencyApiConfig",
    "DisplayConfig",
    "LoggingConfig",
    "RateCacheConfig",
    "Settings",
    "default_settings",
    "get_settings",
    "load_settings",
    "save_settings",
]
