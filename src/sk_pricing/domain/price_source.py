"""PriceSource Protocol — the only view the reward engine has of market data.

Implementations report every lookup failure as PriceUnavailableError so
callers can tell a missing quote apart from a programming error.
"""

from datetime import date
from decimal import Decimal
from typing import Protocol

from src.sk_pricing.domain.models import PriceQuote


class PriceSourceProtocol(Protocol):
    async def get_latest_price(self, symbol: str) -> PriceQuote: ...

    async def get_historical_price(self, symbol: str, day: date) -> Decimal: ...
