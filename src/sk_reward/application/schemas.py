"""Pydantic schemas for sk_reward API.

Wire format is camelCase. Every monetary and quantity field leaves the service
as a decimal string, never a JSON number:
  totalCost         4dp  ("557.2500")
  price / value     2dp  ("100.00")
  quantity          shortest exact form ("5.5")
"""

from datetime import datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.sk_common.money import ZERO, money_to_str, parse_decimal, quantity_to_str
from src.sk_reward.application.service import CreateRewardInput
from src.sk_reward.domain.models import (
    FeeBreakdown,
    HistoricalDayValue,
    LedgerEntry,
    PortfolioPosition,
    RewardEvent,
    RewardStats,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class FeeBreakdownRequest(_CamelModel):
    brokerage: Decimal = ZERO
    stt: Decimal = ZERO
    gst: Decimal = ZERO
    other: Decimal = ZERO

    @field_validator("brokerage", "stt", "gst", "other", mode="before")
    @classmethod
    def _parse_fee(cls, value: object) -> object:
        if value in (None, ""):
            return ZERO
        return parse_decimal(value)  # type: ignore[arg-type]


class CreateRewardRequest(_CamelModel):
    user_id: str = Field(..., description="Rewarded user")
    symbol: str = Field(..., description="Stock symbol, e.g. RELIANCE")
    quantity: Decimal = Field(..., description="Units granted; negative only with adjustment")
    rewarded_at: datetime | None = None
    idempotency_key: str | None = Field(
        None,
        validation_alias=AliasChoices("idempotencyKey", "eventId", "idempotency_key"),
        description="Retry-safe key, unique per user",
    )
    fees: FeeBreakdownRequest = Field(default_factory=FeeBreakdownRequest)
    is_adjustment: bool = Field(
        False,
        validation_alias=AliasChoices("adjustment", "isAdjustment", "is_adjustment"),
    )

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "userId": "u1",
                "symbol": "AAPL",
                "quantity": "5.5",
                "idempotencyKey": "grant-2024-0001",
                "fees": {"brokerage": "5.25", "stt": "1.1", "gst": "0.9", "other": "0"},
                "adjustment": False,
            }
        },
    )

    @field_validator("quantity", mode="before")
    @classmethod
    def _parse_quantity(cls, value: object) -> object:
        return parse_decimal(value)  # type: ignore[arg-type]

    def to_input(self) -> CreateRewardInput:
        return CreateRewardInput(
            user_id=self.user_id,
            symbol=self.symbol,
            quantity=self.quantity,
            fees=FeeBreakdown(
                brokerage=self.fees.brokerage,
                stt=self.fees.stt,
                gst=self.fees.gst,
                other=self.fees.other,
            ),
            rewarded_at=self.rewarded_at,
            idempotency_key=self.idempotency_key,
            is_adjustment=self.is_adjustment,
        )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RewardResponse(_CamelModel):
    id: str
    user_id: str
    symbol: str
    quantity: str
    rewarded_at: str  # ISO8601
    total_cost: str

    @classmethod
    def from_domain(cls, event: RewardEvent) -> "RewardResponse":
        return cls(
            id=event.id,
            user_id=event.user_id,
            symbol=event.symbol,
            quantity=quantity_to_str(event.quantity),
            rewarded_at=event.rewarded_at.isoformat(),
            total_cost=money_to_str(event.total_cost),
        )


class TodayRewardsResponse(_CamelModel):
    rewards: list[RewardResponse]


class HistoricalDayItem(_CamelModel):
    date: str
    total_inr: str

    @classmethod
    def from_domain(cls, value: HistoricalDayValue) -> "HistoricalDayItem":
        return cls(date=value.date, total_inr=money_to_str(value.total_inr, 2))


class HistoricalResponse(_CamelModel):
    days: list[HistoricalDayItem]


class StatsResponse(_CamelModel):
    total_shares_today: dict[str, str]
    portfolio_value_inr: str

    @classmethod
    def from_domain(cls, stats: RewardStats) -> "StatsResponse":
        return cls(
            total_shares_today={
                symbol: quantity_to_str(qty)
                for symbol, qty in sorted(stats.total_shares_today.items())
            },
            portfolio_value_inr=money_to_str(stats.portfolio_value, 2),
        )


class PositionItem(_CamelModel):
    symbol: str
    quantity: str
    price: str
    value_inr: str

    @classmethod
    def from_domain(cls, position: PortfolioPosition) -> "PositionItem":
        return cls(
            symbol=position.symbol,
            quantity=quantity_to_str(position.quantity),
            price=money_to_str(position.price, 2),
            value_inr=money_to_str(position.value, 2),
        )


class PortfolioResponse(_CamelModel):
    positions: list[PositionItem]


class LedgerEntryItem(_CamelModel):
    id: str
    event_id: str
    account: str
    symbol: str
    units: str
    amount_inr: str
    entry_type: str
    created_at: str  # ISO8601

    @classmethod
    def from_domain(cls, entry: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=entry.id,
            event_id=entry.event_id,
            account=entry.account.value,
            symbol=entry.symbol,
            units=quantity_to_str(entry.units),
            amount_inr=money_to_str(entry.amount),
            entry_type=entry.direction.value,
            created_at=entry.created_at.isoformat(),
        )


class LedgerResponse(_CamelModel):
    entries: list[LedgerEntryItem]
