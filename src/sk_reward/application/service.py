"""RewardApplicationService — turns a reward request into a priced event plus ledger.

Flow: validate → idempotency fast-path → price → cost → ledger → persist.

The repository passed to create_reward is a unit of work; the service owns the
commit/rollback boundary. Validation and duplicate checks happen before any
write. Backend failures (price source, store) abort the call after rollback
and are not retried here.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.sk_common.datetime_utils import ensure_utc, utc_now
from src.sk_common.errors import DuplicateRewardError, InternalError, RewardValidationError
from src.sk_common.money import MAX_MONEY, MAX_QUANTITY, quantize_money, quantize_quantity
from src.sk_pricing.domain.price_source import PriceSourceProtocol
from src.sk_reward.domain.ledger import (
    build_ledger_entries,
    compute_total_cost,
    price_component,
    verify_posting,
)
from src.sk_reward.domain.models import FeeBreakdown, RewardEvent
from src.sk_reward.domain.repository import RewardRepositoryProtocol

logger = logging.getLogger(__name__)


@dataclass
class CreateRewardInput:
    user_id: str
    symbol: str
    quantity: Decimal
    fees: FeeBreakdown = field(default_factory=FeeBreakdown)
    rewarded_at: datetime | None = None
    idempotency_key: str | None = None
    is_adjustment: bool = False


def _bounded(
    name: str, value: Decimal, limit: Decimal, quantize: Callable[[Decimal], Decimal]
) -> Decimal:
    """Quantize `value`; NaN, Inf and magnitudes reaching `limit` are rejected."""
    if value.is_finite() and abs(value) < limit:
        rounded = quantize(value)
        if abs(rounded) < limit:
            return rounded
    raise RewardValidationError(f"{name} must be a finite decimal below {limit:f} in magnitude")


def _normalize_fees(fees: FeeBreakdown) -> FeeBreakdown:
    components = {
        "brokerage": fees.brokerage,
        "stt": fees.stt,
        "gst": fees.gst,
        "other": fees.other,
    }
    normalized: dict[str, Decimal] = {}
    for name, value in components.items():
        rounded = _bounded(f"fee component {name}", value, MAX_MONEY, quantize_money)
        if rounded < 0:
            raise RewardValidationError(f"fee component {name} must be non-negative")
        normalized[name] = rounded
    return FeeBreakdown(**normalized)


class RewardApplicationService:
    def __init__(
        self,
        price_source: PriceSourceProtocol,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._prices = price_source
        self._clock = clock

    def _validate(self, req: CreateRewardInput) -> CreateRewardInput:
        user_id = req.user_id.strip()
        symbol = req.symbol.strip().upper()
        if not user_id or not symbol:
            raise RewardValidationError("userId and symbol are required")
        quantity = _bounded("quantity", req.quantity, MAX_QUANTITY, quantize_quantity)
        if quantity == 0:
            raise RewardValidationError("quantity must be non-zero")
        if quantity < 0 and not req.is_adjustment:
            raise RewardValidationError(
                "negative quantities are only allowed for adjustments/refunds"
            )
        return CreateRewardInput(
            user_id=user_id,
            symbol=symbol,
            quantity=quantity,
            fees=_normalize_fees(req.fees),
            rewarded_at=ensure_utc(req.rewarded_at) if req.rewarded_at else self._clock(),
            idempotency_key=req.idempotency_key or None,
            is_adjustment=req.is_adjustment,
        )

    async def create_reward(
        self, repo: RewardRepositoryProtocol, req: CreateRewardInput
    ) -> RewardEvent:
        req = self._validate(req)

        if req.idempotency_key:
            existing = await repo.find_by_idempotency_key(req.user_id, req.idempotency_key)
            if existing is not None:
                logger.info(
                    "Reward idempotency hit: user=%s key=%s", req.user_id, req.idempotency_key
                )
                raise DuplicateRewardError(req.idempotency_key, existing)

        quote = await self._prices.get_latest_price(req.symbol)
        total_cost = compute_total_cost(quote.price, req.quantity, req.fees)
        for amount in (price_component(quote.price, req.quantity), total_cost):
            if abs(amount) >= MAX_MONEY:
                raise RewardValidationError(
                    f"reward value {amount:f} INR must be below {MAX_MONEY:f} in magnitude"
                )

        event = RewardEvent(
            id=str(uuid.uuid4()),
            user_id=req.user_id,
            symbol=req.symbol,
            quantity=req.quantity,
            rewarded_at=req.rewarded_at or self._clock(),
            unit_price=quote.price,
            priced_at=quote.timestamp,
            total_cost=total_cost,
            fees=req.fees,
            idempotency_key=req.idempotency_key,
            is_adjustment=req.is_adjustment,
        )
        entries = build_ledger_entries(event, created_at=self._clock())
        verify_posting(event, entries)

        try:
            await repo.create_reward(event)
            await repo.upsert_ledger_entries(entries)
            await repo.commit()
        except DuplicateRewardError as exc:
            await repo.rollback()
            if exc.existing is not None:
                raise
            # Lost the race against a concurrent identical request
            existing = await repo.find_by_idempotency_key(req.user_id, exc.idempotency_key)
            if existing is None:
                raise InternalError(
                    f"Duplicate reported for key {exc.idempotency_key} but no reward found"
                ) from exc
            raise DuplicateRewardError(exc.idempotency_key, existing) from exc
        except Exception:
            await repo.rollback()
            raise

        logger.info(
            "Reward created: id=%s user=%s symbol=%s qty=%s total_cost=%s",
            event.id,
            event.user_id,
            event.symbol,
            event.quantity,
            event.total_cost,
        )
        return event
