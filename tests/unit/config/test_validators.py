"""Unit tests for configuration validators."""

import warnings

import pytest

from calcfx.config.validators import BusinessRuleValidators, ConfigurationValidators


class TestConfigurationValidators:
    """Test cases for ConfigurationValidators."""

    def test_validate_url_valid(self) -> None:
        """Test valid URL validation."""
        valid_urls = [
            "https://api.example.com",
            "http://localhost:8080",
            "https://api.example.com/v1/latest",
            "https://api.example.com/",  # Should remove trailing slash
        ]

        for url in valid_urls:
            result = ConfigurationValidators.validate_url(url)
            assert result == url.rstrip("/")

    def test_validate_url_invalid(self) -> None:
        """Test invalid URL validation."""
        invalid_urls = [
            "",
            "api.example.com",
            "ftp://api.example.com",
            "https://",
        ]

        for url in invalid_urls:
            with pytest.raises(ValueError):
                ConfigurationValidators.validate_url(url)

    def test_validate_currency_code_valid(self) -> None:
        """Test valid currency code validation."""
        assert ConfigurationValidators.validate_currency_code("USD") == "USD"
        assert ConfigurationValidators.validate_currency_code("eur") == "EUR"
        assert ConfigurationValidators.validate_currency_code(" gbp ") == "GBP"

    def test_validate_currency_code_invalid(self) -> None:
        """Test invalid currency code validation."""
        for code in ["", "US", "USDT", "12A", "US$"]:
            with pytest.raises(ValueError):
                ConfigurationValidators.validate_currency_code(code)

    def test_validate_currency_code_reserved(self) -> None:
        """Test reserved currency codes are rejected."""
        for code in ["XXX", "XAU", "xts"]:
            with pytest.raises(ValueError) as exc_info:
                ConfigurationValidators.validate_currency_code(code)
            assert "reserved or invalid" in str(exc_info.value)

    def test_validate_currency_list(self) -> None:
        """Test currency list normalization."""
        assert ConfigurationValidators.validate_currency_list("usd, EUR,,gbp") == [
            "USD",
            "EUR",
            "GBP",
        ]
        assert ConfigurationValidators.validate_currency_list(
            ["EUR", "usd", "eur"]
        ) == ["EUR", "USD"]

    def test_validate_currency_list_invalid(self) -> None:
        """Test invalid currency lists."""
        with pytest.raises(ValueError):
            ConfigurationValidators.validate_currency_list([])

        with pytest.raises(ValueError):
            ConfigurationValidators.validate_currency_list(" , ")

        with pytest.raises(ValueError):
            ConfigurationValidators.validate_currency_list(["USD", "DOLLAR"])

    def test_validate_file_path(self, tmp_path) -> None:
        """Test file path validation."""
        assert (
            ConfigurationValidators.validate_file_path("data/rates.json")
            == "data/rates.json"
        )

        with pytest.raises(ValueError):
            ConfigurationValidators.validate_file_path("")

        with pytest.raises(ValueError):
            ConfigurationValidators.validate_file_path("rates?.json")

        with pytest.raises(ValueError, match="must name a file"):
            ConfigurationValidators.validate_file_path("data/")

        existing = tmp_path / "rates.json"
        existing.write_text("{}")
        assert ConfigurationValidators.validate_file_path(
            str(existing), must_exist=True
        ) == str(existing)

        missing = str(tmp_path / "missing.json")
        with pytest.raises(ValueError):
            ConfigurationValidators.validate_file_path(missing, must_exist=True)


class TestBusinessRuleValidators:
    """Test cases for BusinessRuleValidators."""

    SUPPORTED = ["USD", "EUR", "GBP"]

    def test_currency_consistency_valid(self) -> None:
        """Test consistent currency configuration."""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            BusinessRuleValidators.validate_currency_consistency(
                supported=self.SUPPORTED,
                major=["USD", "EUR"],
                references=["USD", "EUR"],
                default_pair=("USD", "EUR"),
            )

    def test_unknown_major_currency_warns(self) -> None:
        """Test warning for major currencies outside the supported list."""
        with pytest.warns(UserWarning, match="Major currencies not in supported list"):
            BusinessRuleValidators.validate_currency_consistency(
                supported=self.SUPPORTED,
                major=["USD", "JPY"],
                references=["USD", "EUR"],
                default_pair=("USD", "EUR"),
            )

    def test_unknown_reference_currency_warns(self) -> None:
        """Test warning for reference currencies outside the supported list."""
        with pytest.warns(UserWarning, match="Reference currencies"):
            BusinessRuleValidators.validate_currency_consistency(
                supported=self.SUPPORTED,
                major=["USD"],
                references=["USD", "CHF"],
                default_pair=("USD", "EUR"),
            )

    def test_unsupported_default_pair(self) -> None:
        """Test error for an unsupported default currency."""
        with pytest.raises(ValueError, match="Default currency JPY is not supported"):
            BusinessRuleValidators.validate_currency_consistency(
                supported=self.SUPPORTED,
                major=["USD"],
                references=["USD", "EUR"],
                default_pair=("USD", "JPY"),
            )

    def test_identical_default_pair(self) -> None:
        """Test error for identical default currencies."""
        with pytest.raises(ValueError, match="must be different"):
            BusinessRuleValidators.validate_currency_consistency(
                supported=self.SUPPORTED,
                major=["USD"],
                references=["USD", "EUR"],
                default_pair=("EUR", "EUR"),
            )

    def test_environment_consistency_production_debug(self) -> None:
        """Test error for debug mode in production."""
        with pytest.raises(ValueError, match="Debug mode should not be enabled"):
            BusinessRuleValidators.validate_environment_consistency(
                "production", True, "INFO"
            )

    def test_environment_consistency_production_debug_level(self) -> None:
        """Test warning for DEBUG log level in production."""
        with pytest.warns(UserWarning, match="DEBUG log level in production"):
            BusinessRuleValidators.validate_environment_consistency(
                "production", False, "DEBUG"
            )

    def test_environment_consistency_development_quiet_level(self) -> None:
        """Test warning for a quiet log level in development."""
        with pytest.warns(UserWarning, match="may hide important development"):
            BusinessRuleValidators.validate_environment_consistency(
                "development", True, "ERROR"
            )
