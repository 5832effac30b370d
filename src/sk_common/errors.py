"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Reward (validation, idempotency)
  2xxx: Pricing
  9xxx: System
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.sk_reward.domain.models import RewardEvent


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        data: Any = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.data = data
        super().__init__(message)


# --- 1xxx: Reward ---

class RewardValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1001, f"Invalid reward request: {detail}", 400)


class DuplicateRewardError(AppError):
    """Idempotency collision. Carries the pre-existing event when it is known.

    The storage layer raises this with `existing=None` on a unique-key violation;
    the application service re-reads and re-raises with the stored event.
    """

    def __init__(self, idempotency_key: str, existing: "RewardEvent | None" = None) -> None:
        self.idempotency_key = idempotency_key
        self.existing = existing
        super().__init__(
            1002, f"Duplicate reward for idempotency key: {idempotency_key}", 409
        )


# --- 2xxx: Pricing ---

class PriceUnavailableError(AppError):
    def __init__(self, symbol: str, detail: str = "price lookup failed") -> None:
        self.symbol = symbol
        super().__init__(2001, f"Price unavailable for {symbol!r}: {detail}", 500)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
