"""Unit tests for the durable rate store."""

import json
import os
from datetime import datetime
from decimal import Decimal
from unittest.mock import patch

import pytest

from calcfx.services.rate_store import RateStore


@pytest.fixture
def store(tmp_path) -> RateStore:
    return RateStore(tmp_path / "rates" / "exchange_rates.json")


@pytest.fixture
def rates():
    return {
        "USD": {"USD": Decimal("1"), "EUR": Decimal("0.92"), "IDR": Decimal("15600")},
        "EUR": {"EUR": Decimal("1"), "USD": Decimal("1.087")},
    }


class TestSave:
    """Test writing the rate file."""

    @pytest.mark.asyncio
    async def test_save_writes_document(self, store, rates):
        timestamp = datetime(2024, 5, 1, 12, 30)
        assert await store.save(rates, timestamp=timestamp) is True

        document = json.loads(store.path.read_text(encoding="utf-8"))
        assert document["timestamp"] == "2024-05-01T12:30:00"
        assert document["rates"]["USD"]["EUR"] == "0.92"
        assert document["rates"]["EUR"]["USD"] == "1.087"

    @pytest.mark.asyncio
    async def test_save_replaces_whole_file(self, store, rates):
        await store.save(rates)
        await store.save({"GBP": {"GBP": Decimal("1")}})

        document = json.loads(store.path.read_text(encoding="utf-8"))
        assert list(document["rates"]) == ["GBP"]

    @pytest.mark.asyncio
    async def test_save_leaves_no_temp_files(self, store, rates):
        await store.save(rates)
        assert os.listdir(store.path.parent) == [store.path.name]

    @pytest.mark.asyncio
    async def test_failed_replace_keeps_previous_file(self, store, rates):
        await store.save(rates)
        before = store.path.read_text(encoding="utf-8")

        with patch("calcfx.services.rate_store.os.replace", side_effect=OSError("disk full")):
            assert await store.save({"GBP": {"GBP": Decimal("1")}}) is False

        assert store.path.read_text(encoding="utf-8") == before
        assert os.listdir(store.path.parent) == [store.path.name]

    @pytest.mark.asyncio
    async def test_unwritable_directory_is_swallowed(self, tmp_path, rates):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = RateStore(blocker / "exchange_rates.json")

        assert await store.save(rates) is False


class TestLoad:
    """Test reading the rate file."""

    @pytest.mark.asyncio
    async def test_missing_file(self, store):
        assert await store.load() is None

    @pytest.mark.asyncio
    async def test_round_trip_preserves_decimals(self, store, rates):
        timestamp = datetime(2024, 5, 1, 12, 30)
        await store.save(rates, timestamp=timestamp)

        document = await store.load()

        assert document is not None
        assert document.saved_at == timestamp
        assert document.rates["USD"]["EUR"] == Decimal("0.92")
        assert document.rates["EUR"]["USD"] == Decimal("1.087")

    @pytest.mark.asyncio
    async def test_round_trip_keeps_full_precision(self, store):
        rate = Decimal("1.23456789012345678901234")
        await store.save({"USD": {"XAU": rate}})

        assert "1.23456789012345678901234" in store.path.read_text(encoding="utf-8")
        document = await store.load()
        assert document.rates["USD"]["XAU"] == rate

    @pytest.mark.asyncio
    async def test_numeric_rates_still_load(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(
            '{"timestamp": "2024-05-01T12:30:00", "rates": {"USD": {"EUR": 0.92}}}',
            encoding="utf-8",
        )

        document = await store.load()

        assert document.rates == {"USD": {"EUR": Decimal("0.92")}}

    @pytest.mark.asyncio
    async def test_corrupt_file(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json", encoding="utf-8")

        assert await store.load() is None

    @pytest.mark.asyncio
    async def test_invalid_document(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(
            json.dumps({"timestamp": "x", "rates": {"USD": {"EUR": -1}}}),
            encoding="utf-8",
        )

        assert await store.load() is None

    @pytest.mark.asyncio
    async def test_unparseable_timestamp(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(
            json.dumps({"timestamp": "yesterday", "rates": {"usd": {"eur": 0.9}}}),
            encoding="utf-8",
        )

        document = await store.load()

        assert document is not None
        assert document.saved_at is None
        assert document.rates == {"USD": {"EUR": Decimal("0.9")}}
