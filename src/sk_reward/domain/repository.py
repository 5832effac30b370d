"""Repository Protocol — dependency inversion for testability.

One repository instance is one unit of work: writes made through
create_reward / upsert_ledger_entries become visible to readers only after
commit(). Unit tests inject a mock that conforms to this Protocol;
the infrastructure layer provides the SQL and in-memory implementations.

All list_* methods return events ordered ascending by rewarded_at.
"""

from datetime import date, datetime
from typing import Protocol

from src.sk_reward.domain.models import LedgerEntry, RewardEvent


class RewardRepositoryProtocol(Protocol):
    async def create_reward(self, event: RewardEvent) -> None:
        """Stage the event. Raises DuplicateRewardError on (user_id, idempotency_key) clash."""
        ...

    async def find_by_idempotency_key(
        self, user_id: str, key: str
    ) -> RewardEvent | None: ...

    async def list_by_user_and_date(self, user_id: str, day: date) -> list[RewardEvent]: ...

    async def list_before_date(self, user_id: str, cutoff: datetime) -> list[RewardEvent]: ...

    async def list_all(self, user_id: str) -> list[RewardEvent]: ...

    async def upsert_ledger_entries(self, entries: list[LedgerEntry]) -> None: ...

    async def list_ledger_entries(self, user_id: str) -> list[LedgerEntry]: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
