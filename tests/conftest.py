"""Shared test fixtures."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from calcfx.config.settings import Settings, default_settings
from calcfx.services.rate_client import CurrencyApiClient, CurrencyApiConnectionError


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Default settings with the rate file in a temporary directory."""
    settings = default_settings()
    settings.rate_cache.rates_file_path = str(tmp_path / "exchange_rates.json")
    settings.rate_cache.api_call_delay_ms = 0
    settings.currency_api.retry_delay = 0.0
    return settings


@pytest.fixture
def offline_client() -> AsyncMock:
    """Rate client whose every fetch fails with a network error."""
    client = AsyncMock(spec=CurrencyApiClient)
    client.get_latest_rates.side_effect = CurrencyApiConnectionError(
        "Network error: offline"
    )
    return client


@pytest.fixture
def eur_rates() -> dict[str, Decimal]:
    """A full EUR-based response."""
    return {
        "USD": Decimal("1.09"),
        "GBP": Decimal("0.86"),
        "JPY": Decimal("157.5"),
        "CAD": Decimal("1.47"),
        "AUD": Decimal("1.63"),
        "CHF": Decimal("0.97"),
    }
