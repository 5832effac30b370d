"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class LedgerAccount(str, Enum):
    STOCK_INVENTORY = "stock_inventory"
    FEES_EXPENSE = "fees_expense"
    CASH = "cash"


class EntryDirection(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"
