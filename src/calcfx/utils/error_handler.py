"""Centralized error handling for the calculator application.

This module provides the base error type shared by both engines, user-facing
messages per error category, and an error handler that logs failures and
catches exceptions escaping background tasks.
"""

import asyncio
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

import structlog


class ErrorType(Enum):
    """Types of errors that can occur."""

    VALIDATION = "validation"
    CALCULATION = "calculation"
    DIVISION_BY_ZERO = "division_by_zero"
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    EXTERNAL_API = "external_api"
    RATE_UNAVAILABLE = "rate_unavailable"
    PERSISTENCE = "persistence"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


DEFAULT_USER_MESSAGES = {
    ErrorType.VALIDATION: "Invalid input",
    ErrorType.CALCULATION: "Calculation error",
    ErrorType.DIVISION_BY_ZERO: "Division by zero",
    ErrorType.TIMEOUT: "Exchange rate service timed out",
    ErrorType.CONNECTION: "Exchange rate service unreachable",
    ErrorType.EXTERNAL_API: "Exchange rate service error",
    ErrorType.RATE_UNAVAILABLE: "Exchange rate not available",
    ErrorType.PERSISTENCE: "Could not access saved exchange rates",
    ErrorType.UNKNOWN: "Unexpected error",
}


class AppError(Exception):
    """Base exception for application errors."""

    error_type: ErrorType = ErrorType.UNKNOWN
    severity: ErrorSeverity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        error_type: Optional[ErrorType] = None,
        severity: Optional[ErrorSeverity] = None,
        user_message: Optional[str] = None,
        correlation_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize application error.

        Args:
            message: Technical error message
            error_type: Type of error (defaults to the class type)
            severity: Error severity level (defaults to the class severity)
            user_message: User-friendly error message
            correlation_id: Unique correlation ID for tracking
            context: Additional context information
        """
        super().__init__(message)
        self.message = message
        if error_type is not None:
            self.error_type = error_type
        if severity is not None:
            self.severity = severity
        self.user_message = user_message or DEFAULT_USER_MESSAGES[self.error_type]
        self.correlation_id = correlation_id or str(uuid.uuid4())[:8]
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "message": str(self),
            "error_type": self.error_type.value,
            "severity": self.severity.value,
            "user_message": self.user_message,
            "correlation_id": self.correlation_id,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }


class ErrorHandler:
    """Logs application errors and unhandled background-task exceptions."""

    def __init__(self) -> None:
        self.logger = structlog.get_logger(__name__)
        self.error_counts: Dict[ErrorType, int] = {}

    def handle(self, exc: BaseException, **context: Any) -> AppError:
        """Log an exception and return its application-error view.

        Args:
            exc: Exception to handle
            **context: Additional context for the log record

        Returns:
            The exception itself if it is an ``AppError``, otherwise a wrapping
            ``AppError`` of unknown type
        """
        if isinstance(exc, AppError):
            error = exc
            error.context.update(context)
        else:
            error = AppError(
                str(exc) or exc.__class__.__name__,
                severity=ErrorSeverity.HIGH,
                context=context,
            )

        self.error_counts[error.error_type] = (
            self.error_counts.get(error.error_type, 0) + 1
        )

        log_data = error.to_dict()
        if error.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL):
            log_data["traceback"] = "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )
            self.logger.error("Application error", **log_data)
        elif error.severity == ErrorSeverity.MEDIUM:
            self.logger.warning("Application error", **log_data)
        else:
            self.logger.info("Application error", **log_data)

        return error

    def install(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Install an asyncio exception handler for fire-and-forget tasks.

        Args:
            loop: Event loop (defaults to the running loop)
        """
        target = loop or asyncio.get_running_loop()

        def exception_handler(
            loop: asyncio.AbstractEventLoop, context: Dict[str, Any]
        ) -> None:
            exception = context.get("exception")
            if exception is not None:
                self.handle(exception, source="event_loop")
            else:
                self.logger.error(
                    "Unhandled event loop error", message=context.get("message")
                )

        target.set_exception_handler(exception_handler)
        self.logger.debug("Event loop exception handler installed")
