"""SqlRewardRepository — PostgreSQL implementation of RewardRepositoryProtocol.

Bound to one AsyncSession per request. The session autobegins a transaction on
the first statement; the CALLER (application service) decides when to
commit() or rollback(), so the reward row and its ledger lines land together.

Idempotency is enforced by the partial unique index
uq_rewards_user_idempotency (user_id, idempotency_key); a violation surfaces
as DuplicateRewardError.
"""

import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.sk_common.datetime_utils import utc_day_bounds
from src.sk_common.enums import EntryDirection, LedgerAccount
from src.sk_common.errors import DuplicateRewardError
from src.sk_reward.domain.models import FeeBreakdown, LedgerEntry, RewardEvent

logger = logging.getLogger(__name__)

_UNIQUE_VIOLATION = "23505"

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_REWARD_COLUMNS = """
    id, user_id, symbol, quantity, rewarded_at, idempotency_key,
    fees_brokerage, fees_stt, fees_gst, fees_other,
    unit_price_inr, total_inr_cost, priced_at, is_adjustment
"""

_INSERT_REWARD_SQL = text("""
    INSERT INTO rewards
        (id, user_id, symbol, quantity, rewarded_at, idempotency_key,
         fees_brokerage, fees_stt, fees_gst, fees_other,
         unit_price_inr, total_inr_cost, priced_at, is_adjustment)
    VALUES
        (:id, :user_id, :symbol, :quantity, :rewarded_at, :idempotency_key,
         :fees_brokerage, :fees_stt, :fees_gst, :fees_other,
         :unit_price_inr, :total_inr_cost, :priced_at, :is_adjustment)
""")

_GET_BY_IDEMPOTENCY_KEY_SQL = text(f"""
    SELECT {_REWARD_COLUMNS}
    FROM rewards
    WHERE user_id = :user_id AND idempotency_key = :key
""")

_LIST_IN_RANGE_SQL = text(f"""
    SELECT {_REWARD_COLUMNS}
    FROM rewards
    WHERE user_id = :user_id AND rewarded_at >= :start AND rewarded_at < :end
    ORDER BY rewarded_at ASC, created_at ASC
""")

_LIST_BEFORE_SQL = text(f"""
    SELECT {_REWARD_COLUMNS}
    FROM rewards
    WHERE user_id = :user_id AND rewarded_at < :cutoff
    ORDER BY rewarded_at ASC, created_at ASC
""")

_LIST_ALL_SQL = text(f"""
    SELECT {_REWARD_COLUMNS}
    FROM rewards
    WHERE user_id = :user_id
    ORDER BY rewarded_at ASC, created_at ASC
""")

_UPSERT_LEDGER_SQL = text("""
    INSERT INTO ledger_entries
        (id, event_id, user_id, account, symbol, units, amount_inr,
         entry_type, line_no, created_at)
    VALUES
        (:id, :event_id, :user_id, :account, :symbol, :units, :amount_inr,
         :entry_type, :line_no, :created_at)
    ON CONFLICT (id) DO NOTHING
""")

_LIST_LEDGER_SQL = text("""
    SELECT id, event_id, user_id, account, symbol, units, amount_inr,
           entry_type, line_no, created_at
    FROM ledger_entries
    WHERE user_id = :user_id
    ORDER BY created_at ASC, event_id ASC, line_no ASC
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_reward(row: Any) -> RewardEvent:
    return RewardEvent(
        id=str(row.id),
        user_id=row.user_id,
        symbol=row.symbol,
        quantity=row.quantity,
        rewarded_at=row.rewarded_at,
        unit_price=row.unit_price_inr,
        priced_at=row.priced_at,
        total_cost=row.total_inr_cost,
        fees=FeeBreakdown(
            brokerage=row.fees_brokerage,
            stt=row.fees_stt,
            gst=row.fees_gst,
            other=row.fees_other,
        ),
        idempotency_key=row.idempotency_key,
        is_adjustment=row.is_adjustment,
    )


def _row_to_ledger(row: Any) -> LedgerEntry:
    return LedgerEntry(
        id=str(row.id),
        event_id=str(row.event_id),
        user_id=row.user_id,
        symbol=row.symbol,
        account=LedgerAccount(row.account),
        units=row.units,
        amount=row.amount_inr,
        direction=EntryDirection(row.entry_type),
        line_no=row.line_no,
        created_at=row.created_at,
    )


def _reward_params(event: RewardEvent) -> dict[str, Any]:
    return {
        "id": event.id,
        "user_id": event.user_id,
        "symbol": event.symbol,
        "quantity": event.quantity,
        "rewarded_at": event.rewarded_at,
        "idempotency_key": event.idempotency_key,
        "fees_brokerage": event.fees.brokerage,
        "fees_stt": event.fees.stt,
        "fees_gst": event.fees.gst,
        "fees_other": event.fees.other,
        "unit_price_inr": event.unit_price,
        "total_inr_cost": event.total_cost,
        "priced_at": event.priced_at,
        "is_adjustment": event.is_adjustment,
    }


def _ledger_params(entry: LedgerEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "event_id": entry.event_id,
        "user_id": entry.user_id,
        "account": entry.account.value,
        "symbol": entry.symbol,
        "units": entry.units,
        "amount_inr": entry.amount,
        "entry_type": entry.direction.value,
        "line_no": entry.line_no,
        "created_at": entry.created_at,
    }


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the DBAPI error carries SQLSTATE 23505 (unique_violation)."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == _UNIQUE_VIOLATION


class SqlRewardRepository:
    """Concrete repository — one instance per AsyncSession."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def create_reward(self, event: RewardEvent) -> None:
        try:
            await self._db.execute(_INSERT_REWARD_SQL, _reward_params(event))
        except IntegrityError as exc:
            if event.idempotency_key and is_unique_violation(exc):
                logger.info(
                    "Unique constraint rejected reward: user=%s key=%s",
                    event.user_id,
                    event.idempotency_key,
                )
                raise DuplicateRewardError(event.idempotency_key) from exc
            raise

    async def find_by_idempotency_key(
        self, user_id: str, key: str
    ) -> RewardEvent | None:
        if not key:
            return None
        result = await self._db.execute(
            _GET_BY_IDEMPOTENCY_KEY_SQL, {"user_id": user_id, "key": key}
        )
        row = result.fetchone()
        return _row_to_reward(row) if row else None

    async def list_by_user_and_date(self, user_id: str, day: date) -> list[RewardEvent]:
        start, end = utc_day_bounds(day)
        result = await self._db.execute(
            _LIST_IN_RANGE_SQL, {"user_id": user_id, "start": start, "end": end}
        )
        return [_row_to_reward(row) for row in result.fetchall()]

    async def list_before_date(self, user_id: str, cutoff: datetime) -> list[RewardEvent]:
        result = await self._db.execute(
            _LIST_BEFORE_SQL, {"user_id": user_id, "cutoff": cutoff}
        )
        return [_row_to_reward(row) for row in result.fetchall()]

    async def list_all(self, user_id: str) -> list[RewardEvent]:
        result = await self._db.execute(_LIST_ALL_SQL, {"user_id": user_id})
        return [_row_to_reward(row) for row in result.fetchall()]

    async def upsert_ledger_entries(self, entries: list[LedgerEntry]) -> None:
        if not entries:
            return
        await self._db.execute(_UPSERT_LEDGER_SQL, [_ledger_params(e) for e in entries])

    async def list_ledger_entries(self, user_id: str) -> list[LedgerEntry]:
        result = await self._db.execute(_LIST_LEDGER_SQL, {"user_id": user_id})
        return [_row_to_ledger(row) for row in result.fetchall()]

    async def commit(self) -> None:
        await self._db.commit()

    async def rollback(self) -> None:
        await self._db.rollback()
