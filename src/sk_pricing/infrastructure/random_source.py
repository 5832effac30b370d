"""RandomPriceSource — mock market-data provider with deterministic quotes.

Prices are pseudo-random in [80.00, 2000.00) INR, seeded from the symbol and
the (year, day-of-year, hour) of the requested instant, so the same symbol at
the same hour always gets the same quote.

Latest quotes are cached per symbol for `ttl`; historical prices are anchored
at 12:00 UTC of the requested day and never cached (they are already stable).
"""

import asyncio
import hashlib
import logging
import random
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from src.sk_common.datetime_utils import utc_now
from src.sk_common.errors import PriceUnavailableError
from src.sk_pricing.domain.models import PriceQuote

logger = logging.getLogger(__name__)

_MIN_PRICE_PAISE = 8_000
_MAX_PRICE_PAISE = 200_000  # exclusive
_HISTORICAL_ANCHOR_HOUR = 12


def generate_price(symbol: str, at: datetime) -> Decimal:
    """Deterministic price for `symbol` at the hour containing `at` (2dp INR)."""
    seed_material = f"{symbol}-{at.year}-{at.timetuple().tm_yday}-{at.hour}".encode()
    seed = int.from_bytes(hashlib.sha256(seed_material).digest()[:8], "big")
    paise = random.Random(seed).randrange(_MIN_PRICE_PAISE, _MAX_PRICE_PAISE)
    return Decimal(paise).scaleb(-2)


class RandomPriceSource:
    def __init__(
        self,
        ttl: timedelta,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._cache: dict[str, PriceQuote] = {}
        self._lock = asyncio.Lock()

    async def get_latest_price(self, symbol: str) -> PriceQuote:
        if not symbol:
            raise PriceUnavailableError(symbol, "symbol is required")
        async with self._lock:
            now = self._clock()
            cached = self._cache.get(symbol)
            if cached is not None and now - cached.timestamp < self._ttl:
                return cached
            quote = PriceQuote(symbol=symbol, price=generate_price(symbol, now), timestamp=now)
            self._cache[symbol] = quote
            logger.debug("Quote refreshed: symbol=%s price=%s", symbol, quote.price)
            return quote

    async def get_historical_price(self, symbol: str, day: date) -> Decimal:
        if not symbol:
            raise PriceUnavailableError(symbol, "symbol is required")
        anchor = datetime(
            day.year, day.month, day.day, _HISTORICAL_ANCHOR_HOUR, tzinfo=timezone.utc
        )
        return generate_price(symbol, anchor)
