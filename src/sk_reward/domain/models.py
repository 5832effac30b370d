"""Domain models for sk_reward — pure dataclasses, no SQLAlchemy dependency.

RewardEvent and LedgerEntry are append-only facts, hence frozen.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.sk_common.enums import EntryDirection, LedgerAccount
from src.sk_common.money import ZERO


@dataclass(frozen=True)
class FeeBreakdown:
    brokerage: Decimal = ZERO
    stt: Decimal = ZERO      # securities transaction tax
    gst: Decimal = ZERO
    other: Decimal = ZERO

    def total(self) -> Decimal:
        return self.brokerage + self.stt + self.gst + self.other


@dataclass(frozen=True)
class RewardEvent:
    id: str
    user_id: str
    symbol: str
    quantity: Decimal            # signed; negative only for adjustments
    rewarded_at: datetime
    unit_price: Decimal          # INR, as returned by the price source
    priced_at: datetime
    total_cost: Decimal          # unit_price * quantity + fees.total()
    fees: FeeBreakdown = field(default_factory=FeeBreakdown)
    idempotency_key: str | None = None
    is_adjustment: bool = False


@dataclass(frozen=True)
class LedgerEntry:
    id: str
    event_id: str
    user_id: str
    symbol: str
    account: LedgerAccount
    units: Decimal               # signed quantity on stock_inventory, zero elsewhere
    amount: Decimal              # INR, always >= 0
    direction: EntryDirection
    line_no: int                 # 1..3 within the event
    created_at: datetime


@dataclass(frozen=True)
class PortfolioPosition:
    symbol: str
    quantity: Decimal
    price: Decimal
    value: Decimal


@dataclass(frozen=True)
class HistoricalDayValue:
    date: str                    # YYYY-MM-DD (UTC)
    total_inr: Decimal


@dataclass(frozen=True)
class RewardStats:
    total_shares_today: dict[str, Decimal]
    portfolio_value: Decimal
