"""Shared test fixtures."""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.sk_common.errors import PriceUnavailableError
from src.sk_pricing.domain.models import PriceQuote
from src.sk_reward.api.dependencies import (
    get_aggregation_service,
    get_price_source,
    get_reward_repository,
    get_reward_service,
)
from src.sk_reward.application.aggregation_service import RewardAggregationService
from src.sk_reward.application.service import RewardApplicationService
from src.sk_reward.domain.repository import RewardRepositoryProtocol
from src.sk_reward.infrastructure.memory import InMemoryRewardRepository, InMemoryRewardStore

NOW = datetime(2026, 10, 19, 15, 30, tzinfo=UTC)


class StubPriceSource:
    """Fixed prices per symbol; symbols in `failing` raise PriceUnavailableError."""

    def __init__(
        self,
        latest: dict[str, Decimal] | None = None,
        historical: dict[tuple[str, date], Decimal] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.latest = latest or {}
        self.historical = historical or {}
        self.failing = failing or set()
        self.latest_calls: list[str] = []
        self.historical_calls: list[tuple[str, date]] = []

    async def get_latest_price(self, symbol: str) -> PriceQuote:
        self.latest_calls.append(symbol)
        if symbol in self.failing or symbol not in self.latest:
            raise PriceUnavailableError(symbol, "stubbed failure")
        return PriceQuote(symbol=symbol, price=self.latest[symbol], timestamp=NOW)

    async def get_historical_price(self, symbol: str, day: date) -> Decimal:
        self.historical_calls.append((symbol, day))
        if symbol in self.failing or (symbol, day) not in self.historical:
            raise PriceUnavailableError(symbol, "stubbed failure")
        return self.historical[(symbol, day)]


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture
def price_source() -> StubPriceSource:
    return StubPriceSource(latest={"AAPL": Decimal("100.00"), "TCS": Decimal("3500.50")})


@pytest.fixture
def memory_store() -> InMemoryRewardStore:
    return InMemoryRewardStore()


@pytest.fixture
def memory_repo(memory_store: InMemoryRewardStore) -> InMemoryRewardRepository:
    return InMemoryRewardRepository(memory_store)


@pytest.fixture
def reward_service(
    price_source: StubPriceSource, clock: Callable[[], datetime]
) -> RewardApplicationService:
    return RewardApplicationService(price_source, clock=clock)


@pytest.fixture
def aggregation_service(
    price_source: StubPriceSource, clock: Callable[[], datetime]
) -> RewardAggregationService:
    return RewardAggregationService(price_source, clock=clock)


@pytest.fixture
async def client(
    memory_store: InMemoryRewardStore,
    reward_service: RewardApplicationService,
    aggregation_service: RewardAggregationService,
    price_source: StubPriceSource,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the in-memory backend with stubbed prices and clock."""

    async def _repo() -> AsyncGenerator[RewardRepositoryProtocol, None]:
        yield InMemoryRewardRepository(memory_store)

    app.dependency_overrides[get_reward_repository] = _repo
    app.dependency_overrides[get_price_source] = lambda: price_source
    app.dependency_overrides[get_reward_service] = lambda: reward_service
    app.dependency_overrides[get_aggregation_service] = lambda: aggregation_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
