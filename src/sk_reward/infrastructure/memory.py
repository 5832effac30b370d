"""In-memory implementation of RewardRepositoryProtocol.

Volatile: data resets on restart. Used when DATABASE_URL is unset and in tests.

InMemoryRewardStore is the process-wide state. A single asyncio.Lock guards
the event lists, the idempotency index and the ledger; apply() holds it across
the duplicate check and the insert, which is what makes idempotency race-free
here (the engine-level lookup alone cannot).

InMemoryRewardRepository is a per-request unit of work over the store: writes
are staged and only published by commit(), so a reader never sees a reward
without its ledger lines.
"""

import asyncio
from collections import defaultdict
from datetime import date, datetime

from src.sk_common.datetime_utils import utc_day_bounds
from src.sk_common.errors import DuplicateRewardError
from src.sk_reward.domain.models import LedgerEntry, RewardEvent


def _by_time(events: list[RewardEvent]) -> list[RewardEvent]:
    # sorted() is stable: same-instant events keep insertion order
    return sorted(events, key=lambda e: e.rewarded_at)


class InMemoryRewardStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._rewards_by_user: dict[str, list[RewardEvent]] = defaultdict(list)
        self._idempotency_index: dict[tuple[str, str], RewardEvent] = {}
        self._ledger: dict[str, LedgerEntry] = {}

    async def find_by_idempotency_key(self, user_id: str, key: str) -> RewardEvent | None:
        async with self._lock:
            return self._idempotency_index.get((user_id, key))

    async def list_events(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[RewardEvent]:
        """Events with start <= rewarded_at < end (either bound optional)."""
        async with self._lock:
            events = [
                e
                for e in self._rewards_by_user.get(user_id, [])
                if (start is None or e.rewarded_at >= start)
                and (end is None or e.rewarded_at < end)
            ]
        return _by_time(events)

    async def list_ledger_entries(self, user_id: str) -> list[LedgerEntry]:
        async with self._lock:
            entries = [e for e in self._ledger.values() if e.user_id == user_id]
        return sorted(entries, key=lambda e: (e.created_at, e.event_id, e.line_no))

    async def apply(self, events: list[RewardEvent], entries: list[LedgerEntry]) -> None:
        """Atomically publish a unit of work. All-or-nothing."""
        async with self._lock:
            claimed: set[tuple[str, str]] = set()
            for event in events:
                if not event.idempotency_key:
                    continue
                index_key = (event.user_id, event.idempotency_key)
                existing = self._idempotency_index.get(index_key)
                if existing is not None or index_key in claimed:
                    raise DuplicateRewardError(event.idempotency_key, existing)
                claimed.add(index_key)

            for event in events:
                self._rewards_by_user[event.user_id].append(event)
                if event.idempotency_key:
                    self._idempotency_index[(event.user_id, event.idempotency_key)] = event
            for entry in entries:
                self._ledger[entry.id] = entry


class InMemoryRewardRepository:
    """Unit of work over an InMemoryRewardStore."""

    def __init__(self, store: InMemoryRewardStore) -> None:
        self._store = store
        self._pending_events: list[RewardEvent] = []
        self._pending_entries: list[LedgerEntry] = []

    async def create_reward(self, event: RewardEvent) -> None:
        if event.idempotency_key:
            existing = await self._store.find_by_idempotency_key(
                event.user_id, event.idempotency_key
            )
            if existing is not None:
                raise DuplicateRewardError(event.idempotency_key, existing)
        self._pending_events.append(event)

    async def find_by_idempotency_key(
        self, user_id: str, key: str
    ) -> RewardEvent | None:
        if not key:
            return None
        return await self._store.find_by_idempotency_key(user_id, key)

    async def list_by_user_and_date(self, user_id: str, day: date) -> list[RewardEvent]:
        start, end = utc_day_bounds(day)
        return await self._store.list_events(user_id, start=start, end=end)

    async def list_before_date(self, user_id: str, cutoff: datetime) -> list[RewardEvent]:
        return await self._store.list_events(user_id, end=cutoff)

    async def list_all(self, user_id: str) -> list[RewardEvent]:
        return await self._store.list_events(user_id)

    async def upsert_ledger_entries(self, entries: list[LedgerEntry]) -> None:
        self._pending_entries.extend(entries)

    async def list_ledger_entries(self, user_id: str) -> list[LedgerEntry]:
        return await self._store.list_ledger_entries(user_id)

    async def commit(self) -> None:
        events, entries = self._pending_events, self._pending_entries
        self._pending_events, self._pending_entries = [], []
        if events or entries:
            await self._store.apply(events, entries)

    async def rollback(self) -> None:
        self._pending_events.clear()
        self._pending_entries.clear()
