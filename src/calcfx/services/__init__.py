"""Calculator and currency conversion services."""

from .calculator_engine import (
    CalculatorEngine,
    CalculatorError,
    CalculatorState,
    DivisionByZeroError,
    InvalidInputError,
    UnknownOperatorError,
)
from .conversion_service import (
    ConversionEngine,
    InvalidAmountError,
    UnsupportedCurrencyError,
)
from .rate_cache import CacheMetrics, RateCache
from .rate_client import (
    CurrencyApiClient,
    CurrencyApiClientFactory,
    CurrencyApiException,
)
from .rate_store import RateStore, RateStoreError

__all__ = [
    "CacheMetrics",
    "CalculatorEngine",
    "CalculatorError",
    "CalculatorState",
    "ConversionEngine",
    "CurrencyApiClient",
    "CurrencyApiClientFactory",
    "CurrencyApiException",
    "DivisionByZeroError",
    "InvalidAmountError",
    "InvalidInputError",
    "RateCache",
    "RateStore",
    "RateStoreError",
    "UnknownOperatorError",
    "UnsupportedCurrencyError",
]
