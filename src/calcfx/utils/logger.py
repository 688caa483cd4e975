"""Structured logging system for the calculator application.

This module configures structlog on top of the standard library logging
module, with optional size-rotated file output.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any

import structlog
from structlog.stdlib import BoundLogger

from ..config.settings import Settings


def setup_structured_logging(settings: Settings) -> None:
    """Setup structured logging configuration.

    Args:
        settings: Application settings
    """
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.is_development or settings.logging.format == "text":
        processors.append(structlog.dev.ConsoleRenderer(colors=settings.is_development))
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if settings.logging.file_enabled:
        log_path = Path(settings.logging.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=settings.logging.max_file_size,
                backupCount=settings.logging.backup_count,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        format="%(message)s",
        handlers=handlers,
        level=getattr(logging, settings.logging.level.upper()),
        force=True,
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Bound logger instance
    """
    return structlog.get_logger(name)


class PerformanceLogger:
    """Logger for performance metrics."""

    def __init__(self, logger: BoundLogger):
        self.logger = logger

    def log_api_call(
        self,
        endpoint: str,
        method: str,
        status_code: int | None,
        duration: float,
        **context: Any,
    ) -> None:
        """Log API call performance.

        Args:
            endpoint: API endpoint
            method: HTTP method
            status_code: Response status code (None if no response arrived)
            duration: Call duration in seconds
            **context: Additional context
        """
        self.logger.info(
            "API call",
            endpoint=endpoint,
            method=method,
            status_code=status_code,
            duration_seconds=round(duration, 4),
            success=status_code is not None and 200 <= status_code < 300,
            **context,
        )


def get_performance_logger(name: str) -> PerformanceLogger:
    """Get performance logger instance.

    Args:
        name: Logger name

    Returns:
        Performance logger instance
    """
    return PerformanceLogger(get_logger(name))
