#!/usr/bin/env python3
"""
Stylish Calculator - Main Entry Point

Line-oriented front-end for the calculator and currency converter.
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

# Import after path setup
from calcfx.app import ServiceContainer, create_app  # noqa: E402
from calcfx.config.settings import load_settings  # noqa: E402
from calcfx.utils.error_handler import AppError  # noqa: E402
from calcfx.utils.logger import setup_structured_logging  # noqa: E402

HELP_TEXT = """\
Calculator keys:  0-9 .  + - * / × ÷  =  %
Words:            c (clear)  ce (clear entry)  back  neg (toggle sign)
Currency:         fx <amount> <FROM> <TO>  swap  send  panel  rates
Other:            help  quit"""

CALCULATOR_WORDS = {
    "c": "clear",
    "clear": "clear",
    "ce": "clear_entry",
    "back": "backspace",
    "neg": "toggle_sign",
    "+/-": "toggle_sign",
}


def press_keys(container: ServiceContainer, text: str) -> None:
    """Feed a run of calculator keys such as ``12+3=`` to the keypad."""
    calc = container.calculator_presenter
    for key in text:
        if key.isdigit():
            calc.append_digit(key)
        elif key == ".":
            calc.append_decimal_point()
        elif key in "+-*/×÷":
            calc.set_operator(key)
        elif key == "=":
            calc.evaluate()
        elif key == "%":
            calc.calculate_percentage()
        else:
            print(f"Unknown key: {key}")
            return


def show_calculator(container: ServiceContainer) -> None:
    calc = container.calculator_presenter
    if calc.current_expression:
        print(f"  {calc.current_expression}")
    print(f"= {calc.current_input}")
    if calc.has_error:
        print(f"  ({calc.error_message})")


def show_currency(container: ServiceContainer) -> None:
    currency = container.currency_presenter
    print(currency.conversion_result)
    print(currency.last_updated_text)


async def show_rates(container: ServiceContainer) -> None:
    snapshot = await container.conversion_engine.cache.snapshot()
    for base, table in sorted(snapshot.items()):
        rates = ", ".join(f"{code}={rate}" for code, rate in sorted(table.items()))
        print(f"{base}: {rates}")
    print(container.currency_presenter.last_updated_text)


async def handle_line(container: ServiceContainer, line: str) -> bool:
    """Run one input line.

    Returns:
        False when the user asked to quit
    """
    words = line.split()
    if not words:
        return True

    command = words[0].lower()
    currency = container.currency_presenter
    calc = container.calculator_presenter

    if command in ("quit", "exit", "q"):
        return False

    if command == "help":
        print(HELP_TEXT)
    elif command == "fx":
        if len(words) != 4:
            print("Usage: fx <amount> <FROM> <TO>")
            return True
        engine = container.conversion_engine
        from_info = engine.get_currency(words[2])
        to_info = engine.get_currency(words[3])
        await currency.set_from_currency(from_info)
        await currency.set_to_currency(to_info)
        await currency.set_amount(words[1])
        if not container.settings.display.real_time_conversion:
            await currency.convert()
        show_currency(container)
    elif command == "swap":
        await currency.swap_currencies()
        if not container.settings.display.real_time_conversion:
            await currency.convert()
        show_currency(container)
    elif command == "send":
        if await calc.send_to_currency():
            show_currency(container)
        else:
            print("Nothing to send")
    elif command == "panel":
        await calc.toggle_currency_panel()
        state = "shown" if calc.is_currency_panel_visible else "hidden"
        print(f"Currency panel {state}")
        if calc.is_currency_panel_visible:
            show_currency(container)
    elif command == "rates":
        await show_rates(container)
    elif command in CALCULATOR_WORDS:
        getattr(calc, CALCULATOR_WORDS[command])()
        show_calculator(container)
    else:
        press_keys(container, "".join(words))
        show_calculator(container)

    return True


async def run_console(container: ServiceContainer) -> None:
    """Read commands from stdin until EOF or quit."""
    print(f"{container.settings.application.name} - type 'help' for commands")

    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break

        try:
            if not await handle_line(container, line):
                break
        except AppError as e:
            container.error_handler.handle(e, command=line)
            print(f"Error: {e.user_message} ({e.message})")


async def main() -> int:
    """Main application entry point."""
    settings = load_settings()
    setup_structured_logging(settings)

    try:
        async with create_app(settings) as container:
            await run_console(container)
    except KeyboardInterrupt:
        logging.info("👋 Stopped by user")
    except Exception as e:
        logging.error(f"💥 Critical error: {e}", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
