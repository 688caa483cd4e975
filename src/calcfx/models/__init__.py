"""Data models."""

from .currency import CurrencyInfo, build_catalog
from .rates import (
    BASELINE_USD_RATES,
    CurrencyApiResponse,
    PersistedRates,
    RateResolution,
    RateSource,
)

__all__ = [
    "BASELINE_USD_RATES",
    "CurrencyApiResponse",
    "CurrencyInfo",
    "PersistedRates",
    "RateResolution",
    "RateSource",
    "build_catalog",
]
