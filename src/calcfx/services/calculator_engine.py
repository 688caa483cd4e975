"""Calculator expression engine.

Evaluates a strictly left-to-right, two-operands-at-a-time operator chain and
keeps the display/input state the UI renders. All arithmetic uses
``decimal.Decimal``.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum

import structlog

from ..utils.error_handler import AppError, ErrorType

logger = structlog.get_logger(__name__)

ERROR_DISPLAY = "Error"
INITIAL_INPUT = "0"

OPERATOR_ALIASES = {
    "+": "+",
    "-": "-",
    "*": "*",
    "×": "*",
    "/": "/",
    "÷": "/",
}


class CalculatorError(AppError):
    """Base exception for calculator failures."""

    error_type = ErrorType.CALCULATION


class InvalidInputError(CalculatorError):
    """Text could not be parsed as a finite number."""

    error_type = ErrorType.VALIDATION


class DivisionByZeroError(CalculatorError):
    """Right operand of a division is exactly zero."""

    error_type = ErrorType.DIVISION_BY_ZERO


class UnknownOperatorError(CalculatorError):
    """Operator symbol is not supported."""

    pass


class CalculatorState(str, Enum):
    """Entry state of the calculator."""

    NORMAL = "normal"
    OPERATOR_PENDING = "operator_pending"
    EQUALS_PENDING = "equals_pending"
    ERROR = "error"


def parse_number(text: str) -> Decimal:
    """Parse display text into a finite Decimal.

    Raises:
        InvalidInputError: If the text is not a finite number
    """
    try:
        value = Decimal(text)
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidInputError(f"Invalid number: {text!r}") from e
    if not value.is_finite():
        raise InvalidInputError(f"Invalid number: {text!r}")
    return value


def format_number(value: Decimal) -> str:
    """Fixed-point text, never exponent notation."""
    return format(value, "f")


def apply_operator(operator: str, left: Decimal, right: Decimal) -> Decimal:
    """Apply a binary operator.

    Raises:
        UnknownOperatorError: If the operator is not supported
        DivisionByZeroError: On division by exactly zero
        CalculatorError: On arithmetic overflow
    """
    canonical = OPERATOR_ALIASES.get(operator)
    if canonical is None:
        raise UnknownOperatorError(f"Unknown operator: {operator}")

    try:
        if canonical == "+":
            return left + right
        if canonical == "-":
            return left - right
        if canonical == "*":
            return left * right
        if right == 0:
            raise DivisionByZeroError("Division by zero")
        return left / right
    except ArithmeticError as e:
        raise CalculatorError(f"Arithmetic error: {e}") from e


class CalculatorEngine:
    """Display state machine for a single calculator session.

    Every public operation mutates state and returns nothing; callers read
    the properties afterwards. Failures put the engine in the error state
    instead of raising.
    """

    def __init__(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self._current_input = INITIAL_INPUT
        self._current_expression = ""
        self._current_result = Decimal("0")
        self._has_error = False
        self._error_message = ""
        self._last_action_was_operator = False
        self._last_action_was_equals = False
        self._last_operator = ""
        self._last_right_operand = Decimal("0")

    @property
    def current_input(self) -> str:
        return self._current_input

    @property
    def current_expression(self) -> str:
        return self._current_expression

    @property
    def current_result(self) -> Decimal:
        return self._current_result

    @property
    def has_error(self) -> bool:
        return self._has_error

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def state(self) -> CalculatorState:
        if self._has_error:
            return CalculatorState.ERROR
        if self._last_action_was_operator:
            return CalculatorState.OPERATOR_PENDING
        if self._last_action_was_equals:
            return CalculatorState.EQUALS_PENDING
        return CalculatorState.NORMAL

    def _set_error(self, error: CalculatorError) -> None:
        self._has_error = True
        self._error_message = error.message
        self._current_input = ERROR_DISPLAY
        logger.debug(
            "Calculator error",
            error_type=error.error_type.value,
            message=error.message,
        )

    def _starts_fresh_entry(self) -> bool:
        if self._last_action_was_operator or self._last_action_was_equals:
            self._last_action_was_operator = False
            self._last_action_was_equals = False
            return True
        return False

    def append_digit(self, digit: str) -> None:
        """Append one digit ``0``-``9`` to the input."""
        if self._has_error:
            self.clear()

        if len(digit) != 1 or not digit.isdigit():
            self._set_error(InvalidInputError(f"Invalid digit: {digit!r}"))
            return

        if self._starts_fresh_entry() or self._current_input == INITIAL_INPUT:
            self._current_input = digit
        else:
            self._current_input += digit

        logger.debug("Digit entered", current_input=self._current_input)

    def append_decimal_point(self) -> None:
        """Append a decimal point; repeated presses are ignored."""
        if self._has_error:
            self.clear()

        if self._starts_fresh_entry():
            self._current_input = "0."
        elif "." not in self._current_input:
            self._current_input += "."

    def set_operator(self, operator: str) -> None:
        """Set the pending operator, evaluating any pending expression first."""
        if self._has_error:
            self.clear()

        if self._current_expression and not self._last_action_was_operator:
            self.evaluate()
            if self._has_error:
                return

        try:
            if operator not in OPERATOR_ALIASES:
                raise UnknownOperatorError(f"Unknown operator: {operator}")
            left = parse_number(self._current_input)
        except CalculatorError as e:
            self._set_error(e)
            return

        self._current_expression = f"{format_number(left)} {operator}"
        self._current_result = left
        self._last_action_was_operator = True
        self._last_action_was_equals = False
        self._last_operator = operator

        logger.debug("Operator set", expression=self._current_expression)

    def evaluate(self) -> None:
        """Press equals.

        Pressing it again repeats the last operator with the last right operand
        against the displayed value.
        """
        if self._has_error:
            return

        try:
            if self._last_action_was_equals and self._last_operator:
                # the display may have been edited by sign or percent
                self._current_result = apply_operator(
                    self._last_operator,
                    parse_number(self._current_input),
                    self._last_right_operand,
                )
                self._current_input = format_number(self._current_result)
                logger.debug("Repeated last operation", result=self._current_input)
                return

            if not self._current_expression:
                self._current_result = parse_number(self._current_input)
                return

            left_text, _, operator = self._current_expression.rpartition(" ")
            left = parse_number(left_text)
            right = parse_number(self._current_input)
            self._last_right_operand = right
            self._last_operator = operator

            self._current_result = apply_operator(operator, left, right)
        except CalculatorError as e:
            self._set_error(e)
            return

        self._current_input = format_number(self._current_result)
        self._current_expression = ""
        self._last_action_was_equals = True
        self._last_action_was_operator = False

        logger.debug("Evaluated", result=self._current_input)

    def clear(self) -> None:
        """Reset to the initial session state."""
        self._reset()
        logger.debug("Calculator cleared")

    def clear_entry(self) -> None:
        """Reset only the current input, keeping any pending expression."""
        if self._has_error:
            self.clear()
            return

        self._current_input = INITIAL_INPUT
        self._last_action_was_operator = False
        self._last_action_was_equals = False

    def backspace(self) -> None:
        if self._has_error:
            self.clear()
            return

        if self._last_action_was_operator or self._last_action_was_equals:
            return

        if len(self._current_input) > 1:
            self._current_input = self._current_input[:-1]
        else:
            self._current_input = INITIAL_INPUT

    def toggle_sign(self) -> None:
        if self._has_error:
            self.clear()
            return

        if self._current_input == INITIAL_INPUT:
            return

        if self._current_input.startswith("-"):
            self._current_input = self._current_input[1:]
        else:
            self._current_input = "-" + self._current_input

    def calculate_percentage(self) -> None:
        """Turn the input into a percentage.

        With a pending expression the input becomes that percentage of the
        left operand, otherwise it is divided by 100.
        """
        if self._has_error:
            self.clear()
            return

        try:
            value = parse_number(self._current_input)
            if self._current_expression:
                left_text = self._current_expression.rpartition(" ")[0]
                value = parse_number(left_text) * (value / 100)
            else:
                value = value / 100
        except CalculatorError as e:
            self._set_error(e)
            return
        except ArithmeticError as e:
            self._set_error(CalculatorError(f"Percentage error: {e}"))
            return

        self._current_input = format_number(value)
