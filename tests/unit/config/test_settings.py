"""Unit tests for settings module."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from calcfx.config.models import DisplayConfig, RateCacheConfig
from calcfx.config.settings import (
    Settings,
    default_settings,
    get_settings,
    load_settings,
    save_settings,
)


class TestSettings:
    """Test the combined Settings object."""

    def test_default_settings(self) -> None:
        """Test defaults and convenience properties."""
        settings = default_settings()

        assert settings.supported_currencies[0] == "USD"
        assert settings.api_key == ""
        assert settings.log_level == "INFO"
        assert settings.rates_file == Path("exchange_rates.json")
        assert settings.is_production
        assert not settings.is_development

    def test_nested_environment_overrides(self, monkeypatch) -> None:
        """Test nested environment variables."""
        monkeypatch.setenv("CURRENCY_API__API_KEY", "env-key")
        monkeypatch.setenv("DISPLAY__DECIMAL_PLACES", "3")

        settings = Settings(_env_file=None)

        assert settings.api_key == "env-key"
        assert settings.display.decimal_places == 3

    def test_reference_currencies_must_differ(self) -> None:
        """Test identical hub currencies are rejected."""
        with pytest.raises(ValidationError):
            Settings(
                _env_file=None,
                rate_cache=RateCacheConfig(
                    primary_reference_currency="USD",
                    secondary_reference_currency="USD",
                ),
            )

    def test_business_rule_violation_warns(self) -> None:
        """Test business rule violations are reported as warnings."""
        with pytest.warns(UserWarning, match="Business rule validation warning"):
            Settings(
                _env_file=None,
                display=DisplayConfig(
                    default_from_currency="EUR", default_to_currency="EUR"
                ),
            )

    def test_get_settings_is_cached(self) -> None:
        """Test settings are created once."""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


class TestSettingsFile:
    """Test loading and saving the JSON configuration file."""

    def test_missing_file_is_created(self, tmp_path) -> None:
        """Test a missing file is written from defaults."""
        path = tmp_path / "app_config.json"

        settings = load_settings(path)

        assert path.exists()
        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["display"]["default_from_currency"] == "USD"
        assert document["rate_cache"]["expiration_minutes"] == 60
        assert settings.display.decimal_places == 5

    def test_round_trip(self, tmp_path) -> None:
        """Test saved settings load back unchanged."""
        path = tmp_path / "nested" / "app_config.json"
        settings = default_settings()
        settings.display.decimal_places = 2
        settings.rate_cache.major_currencies = ["EUR", "GBP"]

        assert save_settings(settings, path) is True
        loaded = load_settings(path)

        assert loaded.display.decimal_places == 2
        assert loaded.rate_cache.major_currencies == ["EUR", "GBP"]

    def test_partial_file(self, tmp_path) -> None:
        """Test missing sections fall back to defaults."""
        path = tmp_path / "app_config.json"
        path.write_text(
            json.dumps({"rate_cache": {"expiration_minutes": 15}}), encoding="utf-8"
        )

        settings = load_settings(path)

        assert settings.rate_cache.expiration_minutes == 15
        assert settings.display.default_to_currency == "EUR"

    @pytest.mark.parametrize(
        "content",
        [
            "{broken",
            "[1, 2, 3]",
            json.dumps({"display": {"decimal_places": 99}}),
        ],
    )
    def test_invalid_file_uses_defaults(self, tmp_path, content) -> None:
        """Test unreadable or invalid files fall back to defaults."""
        path = tmp_path / "app_config.json"
        path.write_text(content, encoding="utf-8")

        settings = load_settings(path)

        assert settings.display.decimal_places == 5
        assert path.read_text(encoding="utf-8") == content

    def test_save_failure(self, tmp_path) -> None:
        """Test save reports failure instead of raising."""
        blocker = tmp_path / "blocker"
        blocker.write_text("file")

        assert save_settings(default_settings(), blocker / "app_config.json") is False
