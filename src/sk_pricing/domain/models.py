"""Domain models for sk_pricing — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class PriceQuote:
    symbol: str
    price: Decimal       # INR per unit
    timestamp: datetime  # instant the price is valid for
