"""Presenter for the calculator keypad and display."""

from __future__ import annotations

from ..config.settings import Settings
from ..services.calculator_engine import (
    CalculatorEngine,
    CalculatorError,
    parse_number,
)
from .base import Observable
from .currency_presenter import CurrencyPresenter

DISPLAY_PROPERTIES = (
    "current_input",
    "current_expression",
    "has_error",
    "error_message",
)


class CalculatorPresenter(Observable):
    """Forwards keypad operations to the calculator engine."""

    def __init__(
        self,
        calculator: CalculatorEngine,
        currency: CurrencyPresenter,
        settings: Settings,
    ):
        super().__init__()
        self.calculator = calculator
        self.currency = currency
        self.settings = settings
        self._is_currency_panel_visible = False

    @property
    def current_input(self) -> str:
        return self.calculator.current_input

    @property
    def current_expression(self) -> str:
        return self.calculator.current_expression

    @property
    def has_error(self) -> bool:
        return self.calculator.has_error

    @property
    def error_message(self) -> str:
        return self.calculator.error_message

    @property
    def is_currency_panel_visible(self) -> bool:
        return self._is_currency_panel_visible

    def _refresh(self) -> None:
        self.notify(*DISPLAY_PROPERTIES)

    def append_digit(self, digit: str) -> None:
        self.calculator.append_digit(digit)
        self._refresh()

    def append_decimal_point(self) -> None:
        self.calculator.append_decimal_point()
        self._refresh()

    def set_operator(self, operator: str) -> None:
        self.calculator.set_operator(operator)
        self._refresh()

    def evaluate(self) -> None:
        self.calculator.evaluate()
        self._refresh()

    def clear(self) -> None:
        self.calculator.clear()
        self._refresh()

    def clear_entry(self) -> None:
        self.calculator.clear_entry()
        self._refresh()

    def backspace(self) -> None:
        self.calculator.backspace()
        self._refresh()

    def toggle_sign(self) -> None:
        self.calculator.toggle_sign()
        self._refresh()

    def calculate_percentage(self) -> None:
        self.calculator.calculate_percentage()
        self._refresh()

    async def send_to_currency(self) -> bool:
        """Copy the displayed value into the currency amount.

        Returns:
            True if a value was sent; error or unparseable input sends nothing
        """
        if self.calculator.has_error:
            return False

        try:
            value = parse_number(self.calculator.current_input)
        except CalculatorError:
            return False

        await self.currency.set_amount(value)
        return True

    async def toggle_currency_panel(self) -> None:
        """Show or hide the currency panel, syncing the amount when shown."""
        self._is_currency_panel_visible = not self._is_currency_panel_visible
        self.notify("is_currency_panel_visible")

        if (
            self._is_currency_panel_visible
            and self.settings.display.amount_synchronization
        ):
            await self.send_to_currency()
