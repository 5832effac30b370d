"""Tests for reward costing and the three-line double-entry posting."""

import dataclasses
from decimal import Decimal

import pytest

from src.sk_common.enums import EntryDirection, LedgerAccount
from src.sk_common.errors import InternalError
from src.sk_reward.domain.ledger import (
    build_ledger_entries,
    compute_total_cost,
    signed_total,
    verify_posting,
)
from src.sk_reward.domain.models import FeeBreakdown, LedgerEntry, RewardEvent
from tests.conftest import NOW

FEES = FeeBreakdown(
    brokerage=Decimal("5.0000"),
    stt=Decimal("1.1000"),
    gst=Decimal("0.9000"),
    other=Decimal("0.2500"),
)


def _event(quantity: str, price: str = "100.00", fees: FeeBreakdown = FEES) -> RewardEvent:
    qty = Decimal(quantity)
    unit_price = Decimal(price)
    return RewardEvent(
        id="evt-1",
        user_id="user-1",
        symbol="AAPL",
        quantity=qty,
        rewarded_at=NOW,
        unit_price=unit_price,
        priced_at=NOW,
        total_cost=compute_total_cost(unit_price, qty, fees),
        fees=fees,
        is_adjustment=qty < 0,
    )


def _by_account(event: RewardEvent) -> dict[LedgerAccount, LedgerEntry]:
    return {e.account: e for e in build_ledger_entries(event, NOW)}


class TestComputeTotalCost:
    def test_grant(self) -> None:
        assert compute_total_cost(Decimal("100.00"), Decimal("5.5"), FEES) == Decimal("557.25")

    def test_zero_fees(self) -> None:
        assert compute_total_cost(
            Decimal("3500.50"), Decimal("2"), FeeBreakdown()
        ) == Decimal("7001.00")

    def test_refund_is_negative(self) -> None:
        assert compute_total_cost(Decimal("100.00"), Decimal("-1"), FEES) == Decimal("-92.75")


class TestBuildLedgerEntries:
    def test_three_lines_in_order(self) -> None:
        entries = build_ledger_entries(_event("5.5"), NOW)
        assert [e.line_no for e in entries] == [1, 2, 3]
        assert [e.account for e in entries] == [
            LedgerAccount.STOCK_INVENTORY,
            LedgerAccount.FEES_EXPENSE,
            LedgerAccount.CASH,
        ]
        assert all(e.event_id == "evt-1" for e in entries)
        assert len({e.id for e in entries}) == 3

    def test_grant_posting(self) -> None:
        lines = _by_account(_event("5.5"))
        inventory = lines[LedgerAccount.STOCK_INVENTORY]
        fees = lines[LedgerAccount.FEES_EXPENSE]
        cash = lines[LedgerAccount.CASH]

        assert inventory.amount == Decimal("550.0000")
        assert inventory.units == Decimal("5.5")
        assert inventory.direction is EntryDirection.DEBIT
        assert fees.amount == Decimal("7.25")
        assert fees.direction is EntryDirection.DEBIT
        assert cash.amount == Decimal("557.25")
        assert cash.direction is EntryDirection.CREDIT

    def test_adjustment_credits_inventory(self) -> None:
        entries = build_ledger_entries(_event("-1"), NOW)
        inventory, fees, cash = entries
        assert inventory.direction is EntryDirection.CREDIT
        assert inventory.amount == Decimal("100.0000")
        assert inventory.units == Decimal("-1")
        assert fees.direction is EntryDirection.DEBIT
        # refund of 92.75 flows back into cash
        assert cash.direction is EntryDirection.DEBIT
        assert cash.amount == Decimal("92.75")

    def test_small_adjustment_with_large_fees_still_credits_cash(self) -> None:
        entries = build_ledger_entries(_event("-0.01"), NOW)
        inventory, _, cash = entries
        assert inventory.direction is EntryDirection.CREDIT
        assert inventory.amount == Decimal("1.0000")
        # total_cost = -1.00 + 7.25 = 6.25
        assert cash.direction is EntryDirection.CREDIT
        assert cash.amount == Decimal("6.25")

    def test_amounts_never_negative(self) -> None:
        for qty in ("5.5", "-1", "-0.01", "0.000001"):
            assert all(e.amount >= 0 for e in build_ledger_entries(_event(qty), NOW))

    @pytest.mark.parametrize("qty", ["5.5", "-1", "-0.01", "12.345678", "1"])
    def test_posting_balances(self, qty: str) -> None:
        assert signed_total(build_ledger_entries(_event(qty, "1234.5678"), NOW)) == 0


class TestVerifyPosting:
    def test_valid_posting_passes(self) -> None:
        event = _event("5.5")
        verify_posting(event, build_ledger_entries(event, NOW))

    def test_missing_line_raises(self) -> None:
        event = _event("5.5")
        with pytest.raises(InternalError):
            verify_posting(event, build_ledger_entries(event, NOW)[:2])

    def test_tampered_amount_raises(self) -> None:
        event = _event("5.5")
        entries = build_ledger_entries(event, NOW)
        entries[2] = dataclasses.replace(entries[2], amount=Decimal("557.00"))
        with pytest.raises(InternalError, match="unbalanced"):
            verify_posting(event, entries)

    def test_unreconciled_total_cost_raises(self) -> None:
        event = dataclasses.replace(_event("5.5"), total_cost=Decimal("1.00"))
        with pytest.raises(InternalError, match="total_cost"):
            verify_posting(event, build_ledger_entries(event, NOW))
