"""Unit tests for configuration models."""

import pytest
from pydantic import ValidationError

from calcfx.config.models import (
    DEFAULT_MAJOR_CURRENCIES,
    DEFAULT_SUPPORTED_CURRENCIES,
    ApplicationConfig,
    CurrencyApiConfig,
    DisplayConfig,
    LoggingConfig,
    RateCacheConfig,
)


class TestCurrencyApiConfig:
    """Test CurrencyApiConfig model."""

    def test_defaults(self) -> None:
        """Test default values."""
        config = CurrencyApiConfig()

        assert config.base_url == "https://api.freecurrencyapi.com/v1/latest"
        assert config.api_key == ""
        assert config.timeout == 10.0
        assert config.max_retries == 2
        assert config.supported_currencies == DEFAULT_SUPPORTED_CURRENCIES

    def test_default_list_is_not_shared(self) -> None:
        """Test each instance gets its own currency list."""
        first = CurrencyApiConfig()
        first.supported_currencies.append("SEK")

        assert "SEK" not in CurrencyApiConfig().supported_currencies

    def test_supported_currencies_normalized(self) -> None:
        """Test currency list normalization."""
        config = CurrencyApiConfig(supported_currencies="usd,eur,usd")
        assert config.supported_currencies == ["USD", "EUR"]

    def test_invalid_values(self) -> None:
        """Test validation errors."""
        with pytest.raises(ValidationError):
            CurrencyApiConfig(base_url="not-a-url")

        with pytest.raises(ValidationError):
            CurrencyApiConfig(timeout=0.1)

        with pytest.raises(ValidationError):
            CurrencyApiConfig(supported_currencies=["USD", "BITCOIN"])


class TestRateCacheConfig:
    """Test RateCacheConfig model."""

    def test_defaults(self) -> None:
        """Test default values."""
        config = RateCacheConfig()

        assert config.expiration_minutes == 60
        assert config.rates_file_path == "exchange_rates.json"
        assert config.enable_persistent_storage is True
        assert config.load_rates_at_startup is True
        assert config.major_currencies == DEFAULT_MAJOR_CURRENCIES
        assert config.api_call_delay_ms == 100
        assert config.min_rate_entries == 5
        assert config.reference_currencies == ["USD", "EUR"]

    def test_api_call_delay_seconds(self) -> None:
        """Test millisecond delay conversion."""
        assert RateCacheConfig(api_call_delay_ms=250).api_call_delay == 0.25

    def test_reference_currency_normalized(self) -> None:
        """Test reference currencies are upper-cased."""
        config = RateCacheConfig(
            primary_reference_currency="gbp", secondary_reference_currency="chf"
        )
        assert config.reference_currencies == ["GBP", "CHF"]

    def test_invalid_values(self) -> None:
        """Test validation errors."""
        with pytest.raises(ValidationError):
            RateCacheConfig(expiration_minutes=0)

        with pytest.raises(ValidationError):
            RateCacheConfig(rates_file_path="rates|1.json")

        with pytest.raises(ValidationError):
            RateCacheConfig(primary_reference_currency="DOLLAR")


class TestDisplayConfig:
    """Test DisplayConfig model."""

    def test_defaults(self) -> None:
        """Test default values."""
        config = DisplayConfig()

        assert config.default_from_currency == "USD"
        assert config.default_to_currency == "EUR"
        assert config.decimal_places == 5
        assert config.real_time_conversion is True
        assert config.amount_synchronization is True

    def test_invalid_decimal_places(self) -> None:
        """Test decimal places bounds."""
        with pytest.raises(ValidationError):
            DisplayConfig(decimal_places=11)


class TestLoggingConfig:
    """Test LoggingConfig model."""

    def test_level_and_format_normalized(self) -> None:
        """Test case normalization."""
        config = LoggingConfig(level="debug", format="JSON")

        assert config.level == "DEBUG"
        assert config.format == "json"

    def test_invalid_values(self) -> None:
        """Test validation errors."""
        with pytest.raises(ValidationError) as exc_info:
            LoggingConfig(level="VERBOSE")
        assert "Invalid log level" in str(exc_info.value)

        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")


class TestApplicationConfig:
    """Test ApplicationConfig model."""

    def test_environment_normalized(self) -> None:
        """Test environment normalization."""
        assert ApplicationConfig(environment="Development").environment == "development"

    def test_invalid_environment(self) -> None:
        """Test invalid environment."""
        with pytest.raises(ValidationError):
            ApplicationConfig(environment="qa")
