"""Exchange-rate API client implementation.

This module provides an asynchronous HTTP client for the latest-rates
endpoint, including timeout handling, retry logic, a circuit breaker, and
request metrics.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

import httpx
from pydantic import ValidationError

from ..models.rates import (
    CircuitBreakerState,
    CurrencyApiClientConfig,
    CurrencyApiResponse,
    RequestMetrics,
)
from ..utils.error_handler import AppError, ErrorSeverity, ErrorType
from ..utils.logger import get_performance_logger

logger = logging.getLogger(__name__)
performance_logger = get_performance_logger(__name__)


class CurrencyApiException(AppError):
    """Base exception for exchange-rate API errors."""

    error_type = ErrorType.EXTERNAL_API

    def __init__(
        self,
        message: str,
        error_code: int | None = None,
        details: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.error_code = error_code
        self.details = details


class CurrencyApiClientError(CurrencyApiException):
    """Client-side error (4xx)."""

    severity = ErrorSeverity.HIGH


class CurrencyApiServerError(CurrencyApiException):
    """Server-side error (5xx)."""

    pass


class CurrencyApiRateLimitError(CurrencyApiException):
    """Rate limiting error (429)."""

    pass


class CurrencyApiTimeoutError(CurrencyApiException):
    """Request did not complete within the configured timeout."""

    error_type = ErrorType.TIMEOUT


class CurrencyApiConnectionError(CurrencyApiException):
    """Network-level failure."""

    error_type = ErrorType.CONNECTION


class CurrencyApiPayloadError(CurrencyApiException):
    """Response body is not a usable rate table."""

    pass


class CurrencyApiCircuitBreakerError(CurrencyApiException):
    """Circuit breaker is open."""

    severity = ErrorSeverity.LOW


class CurrencyApiClient:
    """Asynchronous latest-rates client with retries and a circuit breaker."""

    def __init__(
        self,
        config: CurrencyApiClientConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the API client.

        Args:
            config: Client configuration
            transport: Optional httpx transport (used to stub the network)
        """
        self.config = config
        self.circuit_breaker = CircuitBreakerState()
        self.metrics = RequestMetrics()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> CurrencyApiClient:
        """Async context manager entry."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_client(self) -> None:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                limits=httpx.Limits(max_connections=5, max_keepalive_connections=2),
                headers={
                    "User-Agent": "calcfx/1.0.0",
                    "Accept": "application/json",
                },
                follow_redirects=True,
                transport=self._transport,
            )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _check_circuit_breaker(self) -> None:
        """Check circuit breaker state and raise exception if open."""
        if not self.circuit_breaker.is_open:
            return

        if (
            self.circuit_breaker.last_failure_time
            and datetime.now() - self.circuit_breaker.last_failure_time
            > timedelta(seconds=self.config.circuit_breaker_timeout)
        ):
            self.circuit_breaker.half_open_circuit()
            logger.info("Circuit breaker moved to half-open state")
            return

        raise CurrencyApiCircuitBreakerError(
            f"Circuit breaker is open. Last failure: {self.circuit_breaker.last_failure_time}"
        )

    def _handle_circuit_breaker_success(self) -> None:
        """Handle successful request for circuit breaker."""
        if not self.circuit_breaker.is_closed or self.circuit_breaker.failure_count:
            self.circuit_breaker.reset()
            logger.info("Circuit breaker reset to closed state after successful request")

    def _handle_circuit_breaker_failure(self) -> None:
        """Handle failed request for circuit breaker."""
        self.circuit_breaker.record_failure()

        if self.circuit_breaker.is_half_open or (
            self.circuit_breaker.failure_count >= self.config.circuit_breaker_threshold
        ):
            self.circuit_breaker.open_circuit()
            logger.warning(
                f"Circuit breaker opened after {self.circuit_breaker.failure_count} failures"
            )

    def _record_failure(self, started: datetime, status_code: int | None = None) -> None:
        response_time = (datetime.now() - started).total_seconds()
        self._handle_circuit_breaker_failure()
        self.metrics.record_request(False, response_time)
        performance_logger.log_api_call(
            self.config.base_url, "GET", status_code, response_time
        )

    async def _make_request(self, params: dict[str, str]) -> dict[str, Any]:
        """Make HTTP request with retry logic and error handling.

        Args:
            params: Query parameters

        Returns:
            Response JSON object, floats parsed as ``Decimal``

        Raises:
            CurrencyApiException: For any failure after retries
        """
        await self._ensure_client()
        self._check_circuit_breaker()

        url = self.config.base_url
        last_exception: CurrencyApiException | None = None

        for attempt in range(self.config.max_retries + 1):
            started = datetime.now()

            try:
                logger.debug(f"Requesting {url} (attempt {attempt + 1})")

                response = await self._client.get(url, params=params)  # type: ignore[union-attr]
                status = response.status_code

                if status == 429:
                    self._record_failure(started, status)
                    raise CurrencyApiRateLimitError(
                        "Rate limit exceeded", error_code=status
                    )

                if 400 <= status < 500:
                    self._record_failure(started, status)
                    raise CurrencyApiClientError(
                        f"Client error: {status}",
                        error_code=status,
                        details=response.text[:500],
                    )

                if 500 <= status < 600:
                    self._record_failure(started, status)
                    last_exception = CurrencyApiServerError(
                        f"Server error: {status}",
                        error_code=status,
                        details=response.text[:500],
                    )
                    if attempt < self.config.max_retries:
                        delay = self._calculate_retry_delay(attempt)
                        logger.warning(f"Server error {status}, retrying in {delay}s")
                        await asyncio.sleep(delay)
                        continue
                    raise last_exception

                try:
                    data = response.json(parse_float=Decimal)
                except ValueError as e:
                    self._record_failure(started, status)
                    raise CurrencyApiPayloadError(
                        f"Invalid JSON response: {e}", details=response.text[:500]
                    )

                if not isinstance(data, dict):
                    self._record_failure(started, status)
                    raise CurrencyApiPayloadError("Response is not a JSON object")

                response_time = (datetime.now() - started).total_seconds()
                self._handle_circuit_breaker_success()
                self.metrics.record_request(True, response_time)
                performance_logger.log_api_call(url, "GET", status, response_time)
                return data

            except httpx.TimeoutException as e:
                self._record_failure(started)
                last_exception = CurrencyApiTimeoutError(f"Request timeout: {e}")

                if attempt < self.config.max_retries:
                    delay = self._calculate_retry_delay(attempt)
                    logger.warning(f"Request timeout, retrying in {delay}s")
                    await asyncio.sleep(delay)
                    continue

            except httpx.TransportError as e:
                self._record_failure(started)
                last_exception = CurrencyApiConnectionError(f"Network error: {e}")

                if attempt < self.config.max_retries:
                    delay = self._calculate_retry_delay(attempt)
                    logger.warning(f"Network error, retrying in {delay}s")
                    await asyncio.sleep(delay)
                    continue

            except CurrencyApiException:
                raise

            except httpx.HTTPError as e:
                self._record_failure(started)
                last_exception = CurrencyApiException(f"HTTP error: {e}")
                break

        if last_exception:
            raise last_exception

        raise CurrencyApiException("All retry attempts exhausted")

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Calculate retry delay with exponential backoff.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        return self.config.retry_delay * (self.config.backoff_factor**attempt)

    async def get_latest_rates(
        self, base_currency: str, currencies: list[str]
    ) -> dict[str, Decimal]:
        """Get the latest rates for ``currencies`` against ``base_currency``.

        Args:
            base_currency: Pivot currency code
            currencies: Target currency codes

        Returns:
            Rates keyed by upper-case currency code

        Raises:
            CurrencyApiException: For API, network, or payload errors
        """
        params = {
            "base_currency": base_currency.upper(),
            "currencies": ",".join(code.upper() for code in currencies),
        }
        if self.config.api_key:
            params["apikey"] = self.config.api_key

        data = await self._make_request(params)

        try:
            response = CurrencyApiResponse(**data)
        except (ValidationError, TypeError) as e:
            logger.error(f"Response validation error: {e}")
            raise CurrencyApiPayloadError(f"Invalid API response format: {e}")

        logger.info(f"Retrieved {len(response.data)} rates for base {base_currency}")
        return response.data

    async def health_check(self) -> bool:
        """Perform health check on the API.

        Returns:
            True if API is healthy, False otherwise
        """
        try:
            rates = await self.get_latest_rates("USD", ["EUR"])
            return bool(rates)
        except CurrencyApiException as e:
            logger.warning(f"Health check failed: {e}")
            return False

    def get_metrics(self) -> RequestMetrics:
        """Get client metrics."""
        return self.metrics

    def get_circuit_breaker_state(self) -> CircuitBreakerState:
        """Get circuit breaker state."""
        return self.circuit_breaker

    def reset_circuit_breaker(self) -> None:
        """Manually reset circuit breaker."""
        self.circuit_breaker.reset()
        logger.info("Circuit breaker manually reset")

    def reset_metrics(self) -> None:
        """Reset client metrics."""
        self.metrics = RequestMetrics()
        logger.info("Client metrics reset")


class CurrencyApiClientFactory:
    """Factory for creating exchange-rate API clients."""

    @staticmethod
    def create_client(
        base_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        backoff_factor: float = 2.0,
        circuit_breaker_threshold: int = 5,
        circuit_breaker_timeout: int = 60,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> CurrencyApiClient:
        """Create an API client with configuration.

        Returns:
            Configured API client
        """
        config = CurrencyApiClientConfig(
            base_url=base_url,
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            retry_delay=retry_delay,
            backoff_factor=backoff_factor,
            circuit_breaker_threshold=circuit_breaker_threshold,
            circuit_breaker_timeout=circuit_breaker_timeout,
        )

        return CurrencyApiClient(config, transport=transport)

    @staticmethod
    def create_from_settings(
        settings: Any, transport: httpx.AsyncBaseTransport | None = None
    ) -> CurrencyApiClient:
        """Create client from application settings.

        Args:
            settings: Application settings object
            transport: Optional httpx transport

        Returns:
            Configured API client
        """
        api = settings.currency_api
        return CurrencyApiClientFactory.create_client(
            base_url=api.base_url,
            api_key=api.api_key,
            timeout=api.timeout,
            max_retries=api.max_retries,
            retry_delay=api.retry_delay,
            backoff_factor=api.backoff_factor,
            circuit_breaker_threshold=api.circuit_breaker_threshold,
            circuit_breaker_timeout=api.circuit_breaker_timeout,
            transport=transport,
        )
