"""In-memory exchange-rate cache.

This module provides the process-wide rate table store: one table per base
currency, per-base fetch times, and the global last-updated timestamp, all
guarded by a single asyncio lock.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from decimal import Decimal

from pydantic import BaseModel, Field

from ..models.rates import RateTable

logger = logging.getLogger(__name__)

IDENTITY_RATE = Decimal("1")


class CacheMetrics(BaseModel):
    """Rate cache metrics."""

    hits: int = Field(default=0, description="Table lookups that found a table")
    misses: int = Field(default=0, description="Table lookups that found nothing")
    refreshes: int = Field(default=0, description="Tables replaced by a refresh")
    backfills: int = Field(default=0, description="Short responses backfilled")
    merges: int = Field(default=0, description="Persisted snapshots merged")
    start_time: datetime = Field(
        default_factory=datetime.now, description="Metrics collection start time"
    )

    @property
    def total_requests(self) -> int:
        """Total table lookups."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Calculate table hit rate."""
        if self.total_requests == 0:
            return 0.0
        return self.hits / self.total_requests

    def record_hit(self) -> None:
        """Record table hit."""
        self.hits += 1

    def record_miss(self) -> None:
        """Record table miss."""
        self.misses += 1


class RateCache:
    """Rate tables keyed by base currency.

    Every table always maps its own base to 1.
    """

    def __init__(self) -> None:
        self._rates: dict[str, RateTable] = {}
        self._fetched_at: dict[str, datetime] = {}
        self._last_updated: datetime | None = None
        self._lock = asyncio.Lock()
        self.metrics = CacheMetrics()

    @property
    def last_updated(self) -> datetime | None:
        """Time of the most recent successful refresh for any base."""
        return self._last_updated

    def seed(
        self, base: str, table: RateTable, fetched_at: datetime | None = None
    ) -> None:
        """Install a table synchronously.

        Only meant for construction time, before any task shares the cache.
        Seeding does not touch ``last_updated``.
        """
        base = base.upper()
        seeded = {code.upper(): rate for code, rate in table.items()}
        seeded[base] = IDENTITY_RATE
        self._rates[base] = seeded
        self._fetched_at[base] = fetched_at or datetime.now()
        logger.debug(f"Seeded {len(seeded)} rates for base {base}")

    async def get_table(self, base: str) -> RateTable | None:
        """Copy of the table for ``base``, or None."""
        async with self._lock:
            table = self._rates.get(base.upper())
            if table is None:
                self.metrics.record_miss()
                return None
            self.metrics.record_hit()
            return dict(table)

    async def get_tables(self, *bases: str) -> dict[str, RateTable]:
        """Copies of every requested table that exists, read atomically."""
        async with self._lock:
            found: dict[str, RateTable] = {}
            for base in bases:
                table = self._rates.get(base.upper())
                if table is None:
                    self.metrics.record_miss()
                else:
                    self.metrics.record_hit()
                    found[base.upper()] = dict(table)
            return found

    async def get_rate(self, base: str, target: str) -> Decimal | None:
        """Direct rate ``base -> target`` if cached."""
        async with self._lock:
            table = self._rates.get(base.upper())
            if table is None:
                return None
            return table.get(target.upper())

    async def has_table(self, base: str) -> bool:
        async with self._lock:
            return base.upper() in self._rates

    async def bases(self) -> list[str]:
        async with self._lock:
            return list(self._rates)

    async def snapshot(self) -> dict[str, RateTable]:
        """Deep copy of all tables."""
        async with self._lock:
            return {base: dict(table) for base, table in self._rates.items()}

    async def is_stale(self, base: str, max_age: timedelta) -> bool:
        """True if ``base`` has no table or it was fetched more than ``max_age`` ago."""
        async with self._lock:
            fetched_at = self._fetched_at.get(base.upper())
            if base.upper() not in self._rates or fetched_at is None:
                return True
            return datetime.now() - fetched_at > max_age

    async def store_refresh(
        self,
        base: str,
        rates: RateTable,
        min_entries: int = 5,
        fetched_at: datetime | None = None,
    ) -> dict[str, RateTable]:
        """Replace the table for ``base`` with freshly fetched rates.

        A response with fewer than ``min_entries`` entries keeps the previous
        table's entries for currencies it does not mention.

        Returns:
            Deep copy of all tables after the update, for persistence
        """
        base = base.upper()
        now = fetched_at or datetime.now()
        fresh = {code.upper(): rate for code, rate in rates.items()}

        async with self._lock:
            previous = self._rates.get(base, {})
            if len(fresh) < min_entries and previous:
                missing = {
                    code: rate for code, rate in previous.items() if code not in fresh
                }
                fresh = {**missing, **fresh}
                self.metrics.backfills += 1
                logger.warning(
                    f"Short response for {base} ({len(rates)} rates), "
                    f"backfilled {len(missing)} from cache"
                )

            fresh[base] = IDENTITY_RATE
            self._rates[base] = fresh
            self._fetched_at[base] = now
            self._last_updated = now
            self.metrics.refreshes += 1

            return {code: dict(table) for code, table in self._rates.items()}

    async def merge(
        self, rates: dict[str, RateTable], fetched_at: datetime | None = None
    ) -> int:
        """Merge tables without overwriting anything already cached.

        Args:
            rates: Tables keyed by base currency
            fetched_at: Fetch time recorded for bases that were absent

        Returns:
            Number of rate entries added
        """
        added = 0
        when = fetched_at or datetime.now()

        async with self._lock:
            for base, table in rates.items():
                base = base.upper()
                current = self._rates.get(base)
                if current is None:
                    current = {}
                    self._rates[base] = current
                    self._fetched_at[base] = when

                for code, rate in table.items():
                    code = code.upper()
                    if code not in current:
                        current[code] = rate
                        added += 1

                current[base] = IDENTITY_RATE

            self.metrics.merges += 1

        logger.info(f"Merged {added} persisted rates into cache")
        return added
