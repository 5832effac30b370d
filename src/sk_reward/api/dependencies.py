"""FastAPI dependencies: repository backend selection and shared collaborators.

DATABASE_URL unset → InMemoryRewardRepository over one process-wide store.
DATABASE_URL set   → SqlRewardRepository bound to a per-request AsyncSession.
"""

from collections.abc import AsyncGenerator
from datetime import timedelta
from typing import Annotated

from fastapi import Depends

from config.settings import settings
from src.sk_common.database import get_session_factory
from src.sk_pricing.domain.price_source import PriceSourceProtocol
from src.sk_pricing.infrastructure.random_source import RandomPriceSource
from src.sk_reward.application.aggregation_service import RewardAggregationService
from src.sk_reward.application.service import RewardApplicationService
from src.sk_reward.domain.repository import RewardRepositoryProtocol
from src.sk_reward.infrastructure.memory import InMemoryRewardRepository, InMemoryRewardStore
from src.sk_reward.infrastructure.persistence import SqlRewardRepository

_memory_store: InMemoryRewardStore | None = None
_price_source: RandomPriceSource | None = None


def get_memory_store() -> InMemoryRewardStore:
    global _memory_store  # noqa: PLW0603
    if _memory_store is None:
        _memory_store = InMemoryRewardStore()
    return _memory_store


def get_price_source() -> PriceSourceProtocol:
    global _price_source  # noqa: PLW0603
    if _price_source is None:
        _price_source = RandomPriceSource(ttl=timedelta(minutes=settings.PRICE_TTL_MINUTES))
    return _price_source


async def get_reward_repository() -> AsyncGenerator[RewardRepositoryProtocol, None]:
    """Yields one unit of work per request; uncommitted writes are discarded."""
    if settings.use_in_memory_store:
        yield InMemoryRewardRepository(get_memory_store())
        return
    async with get_session_factory()() as session:
        yield SqlRewardRepository(session)


def get_reward_service(
    prices: Annotated[PriceSourceProtocol, Depends(get_price_source)],
) -> RewardApplicationService:
    return RewardApplicationService(prices)


def get_aggregation_service(
    prices: Annotated[PriceSourceProtocol, Depends(get_price_source)],
) -> RewardAggregationService:
    return RewardAggregationService(prices)
