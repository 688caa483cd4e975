"""Main application module for the calculator.

This module provides the service container that wires the engines and
presenters together, and the application factory that manages their
lifecycle.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from .config.settings import Settings, get_settings
from .services.calculator_engine import CalculatorEngine
from .services.conversion_service import ConversionEngine
from .services.rate_client import CurrencyApiClient, CurrencyApiClientFactory
from .services.rate_store import RateStore
from .ui.calculator_presenter import CalculatorPresenter
from .ui.currency_presenter import CurrencyPresenter
from .utils.error_handler import ErrorHandler
from .utils.logger import get_logger


class ServiceContainer:
    """Owns every service instance; nothing is a module-level global."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize service container.

        Args:
            settings: Application settings
            transport: Optional httpx transport for the rate client
        """
        self.settings = settings
        self.logger = get_logger(__name__)

        self.error_handler = ErrorHandler()
        self.rate_client: CurrencyApiClient = (
            CurrencyApiClientFactory.create_from_settings(settings, transport=transport)
        )
        self.rate_store = RateStore(settings.rates_file)
        self.conversion_engine = ConversionEngine(
            settings, self.rate_client, self.rate_store
        )
        self.calculator_engine = CalculatorEngine()

        self.currency_presenter = CurrencyPresenter(self.conversion_engine, settings)
        self.calculator_presenter = CalculatorPresenter(
            self.calculator_engine, self.currency_presenter, settings
        )

        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Install error handling and start the rate warm-up."""
        self.logger.info("🔧 Initializing services...")

        try:
            self.error_handler.install()
            await self.conversion_engine.initialize()
        except Exception as e:
            self.logger.error(f"💥 Service initialization failed: {e}")
            await self.cleanup()
            raise

        self._initialized = True
        self.logger.info(
            "✅ All services initialized",
            application=self.settings.application.name,
            environment=self.settings.application.environment,
        )

    async def cleanup(self) -> None:
        """Cancel background work and close the HTTP client."""
        self.logger.info("🧹 Cleaning up services...")

        await self.conversion_engine.cleanup()
        await self.rate_client.close()

        self._initialized = False
        self.logger.debug("✅ Services cleaned up")


@asynccontextmanager
async def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[ServiceContainer]:
    """Create and initialize the application.

    Args:
        settings: Application settings. If None, will be loaded from environment.
        transport: Optional httpx transport for the rate client

    Yields:
        Initialized service container
    """
    if settings is None:
        settings = get_settings()

    container = ServiceContainer(settings, transport=transport)

    await container.initialize()
    try:
        yield container
    finally:
        await container.cleanup()
