"""Currency conversion engine.

This module provides the conversion engine: the selected currency pair and
amount, rate resolution over the shared rate cache with cross-rate fallback,
live refresh through the rate client, persistence of refreshed rates, and the
background warm-up run once at startup.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Union

from ..config.settings import Settings
from ..models.currency import CurrencyInfo, build_catalog
from ..models.rates import (
    BASELINE_BASE_CURRENCY,
    BASELINE_USD_RATES,
    RateResolution,
    RateSource,
    RateTable,
)
from ..utils.error_handler import AppError, ErrorType
from .base import BaseService
from .rate_cache import RateCache
from .rate_client import CurrencyApiClient, CurrencyApiException
from .rate_store import RateStore

CurrencyRef = Union[CurrencyInfo, str, None]


class UnsupportedCurrencyError(AppError):
    """Currency is not part of the catalog."""

    error_type = ErrorType.VALIDATION

    def __init__(self, code: str, **kwargs):
        super().__init__(f"Unsupported currency: {code}", **kwargs)
        self.code = code


class InvalidAmountError(AppError):
    """Amount is not a finite number."""

    error_type = ErrorType.VALIDATION


class ConversionEngine(BaseService):
    """Converts an amount between two catalog currencies.

    Failures never propagate out of :meth:`convert`; they are reported through
    ``has_error`` and ``error_message`` with ``converted_amount`` reset to 0.
    """

    def __init__(
        self,
        settings: Settings,
        client: CurrencyApiClient,
        store: RateStore | None = None,
        cache: RateCache | None = None,
    ):
        """Initialize the engine.

        Args:
            settings: Application settings
            client: Rate-fetch client
            store: Durable rate store, or None to keep rates in memory only
            cache: Shared rate cache; a new one seeded with the offline
                baseline is created when omitted
        """
        super().__init__(settings)
        self.client = client
        self.store = store

        if cache is None:
            cache = RateCache()
            cache.seed(BASELINE_BASE_CURRENCY, BASELINE_USD_RATES)
        self.cache = cache

        self.available_currencies: list[CurrencyInfo] = build_catalog(
            settings.supported_currencies
        )
        self._by_code = {info.code: info for info in self.available_currencies}

        display = settings.display
        self._from_currency = self._by_code.get(display.default_from_currency)
        self._to_currency = self._by_code.get(display.default_to_currency)
        if self._from_currency is None and self.available_currencies:
            self._from_currency = self.available_currencies[0]
        if self._to_currency is None and len(self.available_currencies) > 1:
            self._to_currency = self.available_currencies[1]

        self._amount = Decimal("1")
        self._converted_amount = Decimal("0")
        self._has_error = False
        self._error_message = ""
        self._warmup_task: asyncio.Task | None = None

    @property
    def from_currency(self) -> CurrencyInfo | None:
        return self._from_currency

    @from_currency.setter
    def from_currency(self, value: CurrencyRef) -> None:
        self._from_currency = self._resolve_currency(value)

    @property
    def to_currency(self) -> CurrencyInfo | None:
        return self._to_currency

    @to_currency.setter
    def to_currency(self, value: CurrencyRef) -> None:
        self._to_currency = self._resolve_currency(value)

    @property
    def amount(self) -> Decimal:
        return self._amount

    @amount.setter
    def amount(self, value: Decimal | int | str) -> None:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise InvalidAmountError(f"Invalid amount: {value!r}") from e
        if not amount.is_finite():
            raise InvalidAmountError(f"Invalid amount: {value!r}")
        self._amount = amount

    @property
    def converted_amount(self) -> Decimal:
        return self._converted_amount

    @property
    def last_updated(self) -> datetime | None:
        """Time of the most recent successful refresh, None if never."""
        return self.cache.last_updated

    @property
    def has_error(self) -> bool:
        return self._has_error

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def warmup_task(self) -> asyncio.Task | None:
        return self._warmup_task

    def get_currency(self, code: str) -> CurrencyInfo:
        """Look up a catalog entry by ISO code.

        Raises:
            UnsupportedCurrencyError: If the code is not in the catalog
        """
        info = self._by_code.get(code.strip().upper())
        if info is None:
            raise UnsupportedCurrencyError(code)
        return info

    def _resolve_currency(self, value: CurrencyRef) -> CurrencyInfo | None:
        if value is None:
            return None
        if isinstance(value, CurrencyInfo):
            if self._by_code.get(value.code) != value:
                raise UnsupportedCurrencyError(value.code)
            return value
        return self.get_currency(value)

    def _set_error(self, message: str) -> None:
        self._has_error = True
        self._error_message = message

    def _clear_error(self) -> None:
        self._has_error = False
        self._error_message = ""

    def report_error(self, message: str) -> None:
        """Put the engine in the error state, e.g. for rejected user input."""
        self._set_error(message)
        self._converted_amount = Decimal("0")

    def swap_currencies(self) -> None:
        """Exchange source and target currencies."""
        self._from_currency, self._to_currency = self._to_currency, self._from_currency

    async def convert(self) -> None:
        """Convert ``amount`` from the source to the target currency."""
        if self._from_currency is None or self._to_currency is None:
            self._set_error("No currency selected")
            self._converted_amount = Decimal("0")
            return

        from_code = self._from_currency.code
        to_code = self._to_currency.code
        amount = self._amount

        try:
            max_age = timedelta(minutes=self.settings.rate_cache.expiration_minutes)
            if await self.cache.is_stale(from_code, max_age):
                try:
                    await self.refresh_rates(from_code)
                except CurrencyApiException as e:
                    self.logger.warning(
                        "Rate refresh failed, using cached rates",
                        base=from_code,
                        error=e.message,
                    )

            self._clear_error()
            resolution = await self.resolve_rate(from_code, to_code)
            self._converted_amount = amount * resolution.rate

            self.logger.debug(
                "Converted",
                amount=str(amount),
                from_currency=from_code,
                to_currency=to_code,
                rate=str(resolution.rate),
                source=resolution.source.value,
            )
        except AppError as e:
            self._set_error(f"Conversion error: {e.message}")
            self._converted_amount = Decimal("0")
            self.logger.warning("Conversion failed", error=e.message)
        except Exception as e:
            self._set_error(f"Conversion error: {e}")
            self._converted_amount = Decimal("0")
            self.logger.exception("Unexpected conversion failure")

    async def resolve_rate(self, from_code: str, to_code: str) -> RateResolution:
        """Resolve the ``from_code -> to_code`` rate.

        Tries identity, a direct cached rate, a cross rate through the
        primary reference currency, then through the secondary one. When all
        fail the rate is 1 and the engine records an error.
        """
        from_code = from_code.upper()
        to_code = to_code.upper()

        if from_code == to_code:
            return RateResolution(
                from_currency=from_code,
                to_currency=to_code,
                rate=Decimal("1"),
                source=RateSource.IDENTITY,
            )

        cache_config = self.settings.rate_cache
        primary = cache_config.primary_reference_currency
        secondary = cache_config.secondary_reference_currency
        tables = await self.cache.get_tables(from_code, primary, secondary)

        direct = tables.get(from_code, {}).get(to_code)
        if direct is not None:
            self.logger.debug("Direct rate", from_currency=from_code, to_currency=to_code)
            return RateResolution(
                from_currency=from_code,
                to_currency=to_code,
                rate=direct,
                source=RateSource.DIRECT,
            )

        for source, hub in (
            (RateSource.CROSS_PRIMARY, primary),
            (RateSource.CROSS_SECONDARY, secondary),
        ):
            table = tables.get(hub)
            if not table or from_code not in table or to_code not in table:
                continue
            if table[from_code] == 0:
                continue

            self.logger.debug(
                "Cross rate",
                from_currency=from_code,
                to_currency=to_code,
                reference=hub,
            )
            return RateResolution(
                from_currency=from_code,
                to_currency=to_code,
                rate=table[to_code] / table[from_code],
                source=source,
                reference_currency=hub,
            )

        message = f"Exchange rate not available for {from_code} to {to_code}"
        self._set_error(message)
        self.logger.warning(
            "No rate available, using 1:1", from_currency=from_code, to_currency=to_code
        )
        return RateResolution(
            from_currency=from_code,
            to_currency=to_code,
            rate=Decimal("1"),
            source=RateSource.FALLBACK,
        )

    async def refresh_rates(self, base: str) -> RateTable:
        """Fetch live rates for ``base`` and store them.

        Returns:
            The table now cached for ``base``

        Raises:
            CurrencyApiException: If the fetch fails; the cache is untouched
        """
        base = base.upper()
        targets = [info.code for info in self.available_currencies]
        rates = await self.client.get_latest_rates(base, targets)

        snapshot = await self.cache.store_refresh(
            base, rates, min_entries=self.settings.rate_cache.min_rate_entries
        )
        self.logger.info("Rates refreshed", base=base, entries=len(snapshot[base]))

        if self.store is not None and self.settings.rate_cache.enable_persistent_storage:
            await self.store.save(snapshot, timestamp=self.cache.last_updated)

        return snapshot[base]

    async def load_persisted_rates(self) -> int:
        """Merge the persisted rate file into the cache.

        Returns:
            Number of rate entries added
        """
        if self.store is None:
            return 0

        document = await self.store.load()
        if document is None:
            return 0

        # unparseable timestamps count as stale
        fetched_at = document.saved_at or datetime.min
        return await self.cache.merge(document.rates, fetched_at=fetched_at)

    async def _warm_up(self) -> None:
        cache_config = self.settings.rate_cache

        if cache_config.enable_persistent_storage and cache_config.load_rates_at_startup:
            await self.load_persisted_rates()

        refreshed = 0
        failed = 0
        for index, base in enumerate(cache_config.major_currencies):
            if index:
                await asyncio.sleep(cache_config.api_call_delay)
            try:
                await self.refresh_rates(base)
                refreshed += 1
            except CurrencyApiException as e:
                failed += 1
                self.logger.warning("Warm-up refresh failed", base=base, error=e.message)

        self.logger.info("Rate warm-up finished", refreshed=refreshed, failed=failed)

    def start(self) -> asyncio.Task:
        """Schedule the background warm-up.

        Returns:
            The warm-up task; calling again while it runs returns the same task
        """
        if self._warmup_task is None or self._warmup_task.done():
            self._warmup_task = asyncio.create_task(self._warm_up(), name="rate-warm-up")
        return self._warmup_task

    async def stop(self) -> None:
        """Cancel the warm-up if it is still running."""
        task = self._warmup_task
        if task is None or task.done():
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            self.logger.info("Rate warm-up cancelled")

    async def initialize(self) -> None:
        self.start()
        self.logger.info(
            "Conversion engine started", currencies=len(self.available_currencies)
        )

    async def cleanup(self) -> None:
        await self.stop()
        self.logger.info("Conversion engine stopped")
