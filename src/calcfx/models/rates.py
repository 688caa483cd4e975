"""Exchange-rate data models.

This module contains Pydantic models for exchange-rate API responses, the
persisted rate file, rate resolution results, and the client resilience state.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator

# Offline baseline, USD based (mid-2023)
BASELINE_BASE_CURRENCY = "USD"
BASELINE_USD_RATES: dict[str, Decimal] = {
    "USD": Decimal("1.0"),
    "EUR": Decimal("0.92"),
    "GBP": Decimal("0.79"),
    "JPY": Decimal("145.0"),
    "CAD": Decimal("1.35"),
    "AUD": Decimal("1.50"),
    "CHF": Decimal("0.90"),
    "CNY": Decimal("7.20"),
    "INR": Decimal("82.0"),
    "RUB": Decimal("90.0"),
    "IDR": Decimal("15600.0"),
}

RateTable = dict[str, Decimal]


def _normalize_table(table: dict[str, Decimal]) -> dict[str, Decimal]:
    normalized: dict[str, Decimal] = {}
    for code, rate in table.items():
        if not rate.is_finite() or rate <= 0:
            raise ValueError(f"Invalid rate for {code}: {rate}")
        normalized[code.upper()] = rate
    return normalized


class CurrencyApiResponse(BaseModel):
    """Latest-rates API response: ``{"data": {CODE: rate}}``."""

    data: dict[str, Decimal] = Field(..., description="Rates keyed by currency code")

    @field_validator("data")
    @classmethod
    def validate_data(cls, v: dict[str, Decimal]) -> dict[str, Decimal]:
        """Require at least one positive rate."""
        if not v:
            raise ValueError("Response contains no rates")
        return _normalize_table(v)


class PersistedRates(BaseModel):
    """On-disk rate file document."""

    timestamp: str = Field(..., description="ISO time the file was written")
    rates: dict[str, dict[str, Decimal]] = Field(
        default_factory=dict, description="Rate tables keyed by base currency"
    )

    @field_validator("rates")
    @classmethod
    def validate_rates(
        cls, v: dict[str, dict[str, Decimal]]
    ) -> dict[str, dict[str, Decimal]]:
        """Normalize codes and reject non-positive rates."""
        return {base.upper(): _normalize_table(table) for base, table in v.items()}

    @property
    def saved_at(self) -> datetime | None:
        """Timestamp as naive local time, None if it is not ISO formatted."""
        try:
            saved = datetime.fromisoformat(self.timestamp)
        except ValueError:
            return None
        if saved.tzinfo is not None:
            saved = saved.astimezone().replace(tzinfo=None)
        return saved

    def to_json_dict(self) -> dict:
        """Document with each rate written as its exact decimal text."""
        return {
            "timestamp": self.timestamp,
            "rates": {
                base: {code: format(rate, "f") for code, rate in table.items()}
                for base, table in self.rates.items()
            },
        }


class RateSource(str, Enum):
    """Fallback tier a resolved rate came from."""

    IDENTITY = "identity"
    DIRECT = "direct"
    CROSS_PRIMARY = "cross_primary"
    CROSS_SECONDARY = "cross_secondary"
    FALLBACK = "fallback"


class RateResolution(BaseModel):
    """Result of resolving a from/to rate."""

    from_currency: str
    to_currency: str
    rate: Decimal
    source: RateSource
    reference_currency: str | None = Field(
        None, description="Hub currency used for a cross rate"
    )

    @property
    def is_fallback(self) -> bool:
        """True if no real rate was found."""
        return self.source == RateSource.FALLBACK


class CurrencyApiClientConfig(BaseModel):
    """Configuration for the exchange-rate API client."""

    base_url: str = Field(..., description="Latest-rates endpoint URL")
    api_key: str = Field(default="", description="API key")
    timeout: float = Field(
        default=10.0, ge=1.0, le=120.0, description="Request timeout in seconds"
    )
    max_retries: int = Field(
        default=2, ge=0, le=10, description="Maximum retry attempts"
    )
    retry_delay: float = Field(
        default=1.0, ge=0.0, le=10.0, description="Initial retry delay"
    )
    backoff_factor: float = Field(
        default=2.0, ge=1.0, le=5.0, description="Exponential backoff factor"
    )
    circuit_breaker_threshold: int = Field(
        default=5, ge=1, le=20, description="Circuit breaker failure threshold"
    )
    circuit_breaker_timeout: int = Field(
        default=60, ge=1, le=600, description="Circuit breaker timeout in seconds"
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate base URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Base URL must start with http:// or https://")
        return v.rstrip("/")


class CircuitBreakerState(BaseModel):
    """Circuit breaker state tracking."""

    failure_count: int = Field(default=0, description="Consecutive failure count")
    last_failure_time: datetime | None = Field(
        None, description="Last failure timestamp"
    )
    state: str = Field(
        default="closed", description="Circuit state: closed, open, half_open"
    )

    @property
    def is_closed(self) -> bool:
        """Check if circuit is closed (normal operation)."""
        return self.state == "closed"

    @property
    def is_open(self) -> bool:
        """Check if circuit is open (blocking requests)."""
        return self.state == "open"

    @property
    def is_half_open(self) -> bool:
        """Check if circuit is half-open (testing recovery)."""
        return self.state == "half_open"

    def reset(self) -> None:
        """Reset circuit breaker to closed state."""
        self.failure_count = 0
        self.last_failure_time = None
        self.state = "closed"

    def record_failure(self) -> None:
        """Record a failure."""
        self.failure_count += 1
        self.last_failure_time = datetime.now()

    def open_circuit(self) -> None:
        """Open the circuit."""
        self.state = "open"

    def half_open_circuit(self) -> None:
        """Set circuit to half-open state."""
        self.state = "half_open"


class RequestMetrics(BaseModel):
    """Metrics for exchange-rate API requests."""

    total_requests: int = Field(default=0, description="Total requests made")
    successful_requests: int = Field(default=0, description="Successful requests")
    failed_requests: int = Field(default=0, description="Failed requests")
    avg_response_time: float = Field(
        default=0.0, description="Average response time in seconds"
    )
    last_request_time: datetime | None = Field(
        None, description="Last request timestamp"
    )
    last_success_time: datetime | None = Field(
        None, description="Last successful request timestamp"
    )

    @property
    def success_rate(self) -> float:
        """Calculate success rate as percentage."""
        if self.total_requests == 0:
            return 0.0
        return (self.successful_requests / self.total_requests) * 100

    @property
    def failure_rate(self) -> float:
        """Calculate failure rate as percentage."""
        if self.total_requests == 0:
            return 0.0
        return (self.failed_requests / self.total_requests) * 100

    def record_request(self, success: bool, response_time: float) -> None:
        """Record a request."""
        self.total_requests += 1
        self.last_request_time = datetime.now()

        if success:
            self.successful_requests += 1
            self.last_success_time = datetime.now()
        else:
            self.failed_requests += 1

        if self.total_requests == 1:
            self.avg_response_time = response_time
        else:
            self.avg_response_time = (
                self.avg_response_time * (self.total_requests - 1) + response_time
            ) / self.total_requests
