"""Base service classes."""

from abc import ABC, abstractmethod

import structlog

from ..config.settings import Settings


class BaseService(ABC):
    """Service owned by the composition root.

    ``initialize`` is called once after construction and ``cleanup`` on
    shutdown; neither may be skipped when the other ran.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.logger = structlog.get_logger(
            type(self).__module__, service=type(self).__name__
        )

    @abstractmethod
    async def initialize(self) -> None:
        """Start background work."""

    @abstractmethod
    async def cleanup(self) -> None:
        """Stop background work and release resources."""
