"""Framework-free presenters the user interface binds to."""

from .base import Observable
from .calculator_presenter import CalculatorPresenter
from .currency_presenter import CurrencyPresenter

__all__ = ["CalculatorPresenter", "CurrencyPresenter", "Observable"]
