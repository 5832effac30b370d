"""Pure folds over the reward event log."""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from src.sk_common.datetime_utils import ensure_utc
from src.sk_common.money import ZERO
from src.sk_reward.domain.models import RewardEvent


def net_quantity_by_symbol(events: Iterable[RewardEvent]) -> dict[str, Decimal]:
    """Signed sum of quantities per symbol. Order of events does not matter."""
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for event in events:
        totals[event.symbol] += event.quantity
    return dict(totals)


def net_quantity_by_day(events: Iterable[RewardEvent]) -> dict[date, dict[str, Decimal]]:
    """Partition by UTC calendar day of rewarded_at, then net per symbol."""
    by_day: dict[date, dict[str, Decimal]] = defaultdict(lambda: defaultdict(lambda: ZERO))
    for event in events:
        by_day[ensure_utc(event.rewarded_at).date()][event.symbol] += event.quantity
    return {day: dict(per_symbol) for day, per_symbol in by_day.items()}
