"""Reward costing and double-entry posting rules.

Every reward produces exactly three lines:

    stock_inventory  |unit_price * quantity|  DEBIT if quantity > 0 else CREDIT
    fees_expense     fees.total()             always DEBIT
    cash             |total_cost|             CREDIT if total_cost >= 0 else DEBIT

Because total_cost == price_component + fee_total (both already at money
scale), debits and credits always net to zero.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal

from src.sk_common.enums import EntryDirection, LedgerAccount
from src.sk_common.errors import InternalError
from src.sk_common.money import ZERO, quantize_money
from src.sk_reward.domain.models import FeeBreakdown, LedgerEntry, RewardEvent

logger = logging.getLogger(__name__)


def price_component(unit_price: Decimal, quantity: Decimal) -> Decimal:
    """Signed market value of the granted units, at money scale."""
    return quantize_money(unit_price * quantity)


def compute_total_cost(unit_price: Decimal, quantity: Decimal, fees: FeeBreakdown) -> Decimal:
    """total_cost = unit_price * quantity + fees. Negative quantity yields a refund."""
    return price_component(unit_price, quantity) + quantize_money(fees.total())


def build_ledger_entries(event: RewardEvent, created_at: datetime) -> list[LedgerEntry]:
    """Pure function of a priced event → its three posting lines."""
    price_part = price_component(event.unit_price, event.quantity)
    fee_total = quantize_money(event.fees.total())

    inventory_direction = EntryDirection.DEBIT if event.quantity > 0 else EntryDirection.CREDIT
    cash_direction = EntryDirection.CREDIT if event.total_cost >= 0 else EntryDirection.DEBIT

    lines = (
        (LedgerAccount.STOCK_INVENTORY, event.quantity, abs(price_part), inventory_direction),
        (LedgerAccount.FEES_EXPENSE, ZERO, abs(fee_total), EntryDirection.DEBIT),
        (LedgerAccount.CASH, ZERO, abs(event.total_cost), cash_direction),
    )
    return [
        LedgerEntry(
            id=str(uuid.uuid4()),
            event_id=event.id,
            user_id=event.user_id,
            symbol=event.symbol,
            account=account,
            units=units,
            amount=amount,
            direction=direction,
            line_no=line_no,
            created_at=created_at,
        )
        for line_no, (account, units, amount, direction) in enumerate(lines, start=1)
    ]


def signed_total(entries: list[LedgerEntry]) -> Decimal:
    """Debits minus credits. Zero for a balanced posting."""
    total = ZERO
    for entry in entries:
        total += entry.amount if entry.direction is EntryDirection.DEBIT else -entry.amount
    return total


def verify_posting(event: RewardEvent, entries: list[LedgerEntry]) -> None:
    """Check the reconciliation rules for one event. Raises InternalError if violated."""
    by_account = {e.account: e for e in entries}
    violations: list[str] = []

    if len(entries) != 3 or len(by_account) != 3:
        violations.append(f"expected 3 distinct lines, got {len(entries)}")
    else:
        inventory = by_account[LedgerAccount.STOCK_INVENTORY]
        fees = by_account[LedgerAccount.FEES_EXPENSE]
        cash = by_account[LedgerAccount.CASH]
        expected_price = abs(price_component(event.unit_price, event.quantity))
        if inventory.amount != expected_price:
            violations.append(f"inventory {inventory.amount} != {expected_price}")
        if fees.amount != quantize_money(event.fees.total()):
            violations.append(f"fees {fees.amount} != {event.fees.total()}")
        if cash.amount != abs(event.total_cost):
            violations.append(f"cash {cash.amount} != |{event.total_cost}|")
        if any(e.amount < 0 for e in entries):
            violations.append("negative ledger amount")
        imbalance = signed_total(entries)
        if imbalance != 0:
            violations.append(f"unbalanced posting: debits - credits = {imbalance}")

    if event.total_cost != compute_total_cost(event.unit_price, event.quantity, event.fees):
        violations.append(f"total_cost {event.total_cost} does not reconcile")

    if violations:
        msg = f"Ledger invariant violated for event {event.id}: " + "; ".join(violations)
        logger.error(msg)
        raise InternalError(msg)
