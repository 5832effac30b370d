"""Tests for the deterministic mock price source."""

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest

from src.sk_common.errors import PriceUnavailableError
from src.sk_pricing.infrastructure.random_source import RandomPriceSource, generate_price


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


START = datetime(2026, 10, 19, 9, 15, tzinfo=UTC)


class TestGeneratePrice:
    def test_deterministic_within_hour(self) -> None:
        assert generate_price("AAPL", START) == generate_price(
            "AAPL", START + timedelta(minutes=40)
        )

    def test_in_range_with_two_places(self) -> None:
        for hour in range(24):
            price = generate_price("RELIANCE", START.replace(hour=hour))
            assert Decimal("80.00") <= price < Decimal("2000.00")
            assert price.as_tuple().exponent == -2

    def test_symbols_differ(self) -> None:
        prices = {generate_price(s, START) for s in ("AAPL", "TCS", "INFY", "HDFC", "ITC")}
        assert len(prices) > 1


class TestLatestPrice:
    async def test_cached_within_ttl(self) -> None:
        clock = FakeClock(START)
        source = RandomPriceSource(ttl=timedelta(minutes=60), clock=clock)

        first = await source.get_latest_price("AAPL")
        clock.now = START + timedelta(minutes=59)
        second = await source.get_latest_price("AAPL")

        assert second is first
        assert second.timestamp == START

    async def test_refreshed_after_ttl(self) -> None:
        clock = FakeClock(START)
        source = RandomPriceSource(ttl=timedelta(minutes=60), clock=clock)

        await source.get_latest_price("AAPL")
        clock.now = START + timedelta(minutes=61)
        refreshed = await source.get_latest_price("AAPL")

        assert refreshed.timestamp == clock.now
        assert refreshed.price == generate_price("AAPL", clock.now)

    async def test_empty_symbol_fails(self) -> None:
        source = RandomPriceSource(ttl=timedelta(minutes=60), clock=FakeClock(START))
        with pytest.raises(PriceUnavailableError):
            await source.get_latest_price("")


class TestHistoricalPrice:
    async def test_anchored_at_midday(self) -> None:
        source = RandomPriceSource(ttl=timedelta(minutes=60), clock=FakeClock(START))
        price = await source.get_historical_price("AAPL", date(2026, 10, 18))
        assert price == generate_price("AAPL", datetime(2026, 10, 18, 12, tzinfo=UTC))

    async def test_stable_across_calls(self) -> None:
        clock = FakeClock(START)
        source = RandomPriceSource(ttl=timedelta(minutes=60), clock=clock)
        first = await source.get_historical_price("TCS", date(2026, 1, 2))
        clock.now = START + timedelta(days=3)
        assert await source.get_historical_price("TCS", date(2026, 1, 2)) == first

    async def test_empty_symbol_fails(self) -> None:
        source = RandomPriceSource(ttl=timedelta(minutes=60), clock=FakeClock(START))
        with pytest.raises(PriceUnavailableError):
            await source.get_historical_price("", date(2026, 1, 2))
