"""Durable exchange-rate store.

The whole rate snapshot lives in one JSON file that is rewritten in full after
every successful refresh and read once at startup.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from pydantic import ValidationError

from ..models.rates import PersistedRates, RateTable
from ..utils.error_handler import AppError, ErrorSeverity, ErrorType

logger = logging.getLogger(__name__)


class RateStoreError(AppError):
    """Rate file could not be read or written."""

    error_type = ErrorType.PERSISTENCE
    severity = ErrorSeverity.LOW

    def __init__(self, message: str, path: str = "", operation: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.path = path
        self.operation = operation


class RateStore:
    """JSON file holding ``{"timestamp": ..., "rates": {BASE: {CODE: rate}}}``."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._write_lock = asyncio.Lock()

    def _read(self) -> PersistedRates:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise RateStoreError(
                f"Cannot read rate file: {e}", path=str(self.path), operation="load"
            ) from e

        try:
            data = json.loads(text, parse_float=Decimal)
            return PersistedRates.model_validate(data)
        except (ValueError, ValidationError) as e:
            raise RateStoreError(
                f"Invalid rate file: {e}", path=str(self.path), operation="load"
            ) from e

    def _write(self, document: PersistedRates) -> None:
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
            )
        except OSError as e:
            raise RateStoreError(
                f"Cannot create rate file: {e}", path=str(self.path), operation="save"
            ) from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document.to_json_dict(), f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise RateStoreError(
                f"Cannot write rate file: {e}", path=str(self.path), operation="save"
            ) from e

    async def load(self) -> PersistedRates | None:
        """Read the persisted snapshot.

        Returns:
            The snapshot, or None if the file is missing, unreadable or invalid
        """
        if not await asyncio.to_thread(self.path.exists):
            logger.info(f"No rate file at {self.path}")
            return None

        try:
            document = await asyncio.to_thread(self._read)
        except RateStoreError as e:
            logger.error(f"Failed to load rates: {e}")
            return None

        logger.info(
            f"Loaded {len(document.rates)} rate tables from {self.path} "
            f"(saved {document.timestamp})"
        )
        return document

    async def save(
        self, rates: dict[str, RateTable], timestamp: datetime | None = None
    ) -> bool:
        """Write the whole snapshot, replacing the previous file atomically.

        Returns:
            True on success; failures are logged and reported as False
        """
        document = PersistedRates(
            timestamp=(timestamp or datetime.now()).isoformat(), rates=rates
        )

        async with self._write_lock:
            try:
                await asyncio.to_thread(self._write, document)
            except RateStoreError as e:
                logger.error(f"Failed to save rates: {e}")
                return False

        logger.info(f"Saved {len(rates)} rate tables to {self.path}")
        return True
