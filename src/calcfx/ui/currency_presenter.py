"""Presenter for the currency conversion panel."""

from __future__ import annotations

from decimal import Decimal

import structlog

from ..config.settings import Settings
from ..models.currency import CurrencyInfo
from ..services.conversion_service import ConversionEngine, CurrencyRef
from ..utils.error_handler import AppError
from .base import Observable

logger = structlog.get_logger(__name__)

RESULT_PROPERTIES = (
    "converted_amount",
    "conversion_result",
    "last_updated_text",
    "has_error",
)


class CurrencyPresenter(Observable):
    """Binds the conversion engine to a currency panel.

    With real-time conversion enabled every change of currency or amount
    runs a conversion.
    """

    def __init__(self, engine: ConversionEngine, settings: Settings):
        super().__init__()
        self.engine = engine
        self.settings = settings
        self._is_busy = False

    @property
    def available_currencies(self) -> list[CurrencyInfo]:
        return self.engine.available_currencies

    @property
    def from_currency(self) -> CurrencyInfo | None:
        return self.engine.from_currency

    @property
    def to_currency(self) -> CurrencyInfo | None:
        return self.engine.to_currency

    @property
    def amount(self) -> Decimal:
        return self.engine.amount

    @property
    def converted_amount(self) -> Decimal:
        return self.engine.converted_amount

    @property
    def has_error(self) -> bool:
        return self.engine.has_error

    @property
    def is_busy(self) -> bool:
        return self._is_busy

    @property
    def conversion_result(self) -> str:
        """Formatted conversion line."""
        engine = self.engine
        if engine.has_error:
            return f"Error: {engine.error_message}"

        if engine.from_currency is None or engine.to_currency is None:
            return "Select currencies to convert"

        places = self.settings.display.decimal_places
        return (
            f"{engine.amount:.2f} {engine.from_currency.code} = "
            f"{engine.converted_amount:.{places}f} {engine.to_currency.code}"
        )

    @property
    def last_updated_text(self) -> str:
        last_updated = self.engine.last_updated
        if last_updated is None:
            return "Not updated yet"
        return f"Last updated: {last_updated:%Y-%m-%d %H:%M}"

    def _set_busy(self, value: bool) -> None:
        if self._is_busy != value:
            self._is_busy = value
            self.notify("is_busy")

    async def _after_change(self) -> None:
        if self.settings.display.real_time_conversion:
            await self.convert()

    def _reject(self, error: AppError) -> None:
        self.engine.report_error(error.message)
        logger.info("Input rejected", error=error.message)
        self.notify(*RESULT_PROPERTIES)

    async def set_from_currency(self, value: CurrencyRef) -> None:
        previous = self.engine.from_currency
        try:
            self.engine.from_currency = value
        except AppError as e:
            self._reject(e)
            return
        if self.engine.from_currency == previous and not self.engine.has_error:
            return
        self.notify("from_currency")
        await self._after_change()

    async def set_to_currency(self, value: CurrencyRef) -> None:
        previous = self.engine.to_currency
        try:
            self.engine.to_currency = value
        except AppError as e:
            self._reject(e)
            return
        if self.engine.to_currency == previous and not self.engine.has_error:
            return
        self.notify("to_currency")
        await self._after_change()

    async def set_amount(self, value: Decimal | int | str) -> None:
        previous = self.engine.amount
        try:
            self.engine.amount = value
        except AppError as e:
            self._reject(e)
            return
        if self.engine.amount == previous and not self.engine.has_error:
            return
        self.notify("amount")
        await self._after_change()

    async def swap_currencies(self) -> None:
        self.engine.swap_currencies()
        self.notify("from_currency", "to_currency")
        await self._after_change()

    async def convert(self) -> None:
        """Run a conversion and publish the result."""
        self._set_busy(True)
        try:
            await self.engine.convert()
        finally:
            self._set_busy(False)

        logger.debug("Conversion published", result=self.conversion_result)
        self.notify(*RESULT_PROPERTIES)
