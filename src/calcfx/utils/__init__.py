"""Utility modules for the calculator application."""

from .error_handler import AppError, ErrorHandler, ErrorSeverity, ErrorType
from .logger import get_logger, setup_structured_logging

__all__ = [
    "AppError",
    "ErrorHandler",
    "ErrorSeverity",
    "ErrorType",
    "get_logger",
    "setup_structured_logging",
]
