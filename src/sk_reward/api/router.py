"""sk_reward REST API — 1 write endpoint, 5 read endpoints. No authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.sk_common.errors import DuplicateRewardError
from src.sk_common.response import ApiResponse, success_response
from src.sk_reward.api.dependencies import (
    get_aggregation_service,
    get_reward_repository,
    get_reward_service,
)
from src.sk_reward.application.aggregation_service import RewardAggregationService
from src.sk_reward.application.schemas import (
    CreateRewardRequest,
    HistoricalDayItem,
    HistoricalResponse,
    LedgerEntryItem,
    LedgerResponse,
    PortfolioResponse,
    PositionItem,
    RewardResponse,
    StatsResponse,
    TodayRewardsResponse,
)
from src.sk_reward.application.service import RewardApplicationService
from src.sk_reward.domain.repository import RewardRepositoryProtocol

router = APIRouter(tags=["rewards"])

Repo = Annotated[RewardRepositoryProtocol, Depends(get_reward_repository)]
Aggregations = Annotated[RewardAggregationService, Depends(get_aggregation_service)]


def _respond(request: Request, data: object) -> ApiResponse:
    return success_response(data, getattr(request.state, "request_id", None))


@router.post("/reward", status_code=201)
async def create_reward(
    body: CreateRewardRequest,
    repo: Repo,
    service: Annotated[RewardApplicationService, Depends(get_reward_service)],
    request: Request,
) -> ApiResponse:
    try:
        event = await service.create_reward(repo, body.to_input())
    except DuplicateRewardError as exc:
        if exc.existing is not None:
            exc.data = RewardResponse.from_domain(exc.existing).model_dump(by_alias=True)
        raise
    return _respond(request, RewardResponse.from_domain(event).model_dump(by_alias=True))


@router.get("/today-stocks/{user_id}")
async def today_stocks(
    user_id: str, repo: Repo, aggregations: Aggregations, request: Request
) -> ApiResponse:
    events = await aggregations.get_today_rewards(repo, user_id)
    data = TodayRewardsResponse(rewards=[RewardResponse.from_domain(e) for e in events])
    return _respond(request, data.model_dump(by_alias=True))


@router.get("/historical-inr/{user_id}")
async def historical_inr(
    user_id: str, repo: Repo, aggregations: Aggregations, request: Request
) -> ApiResponse:
    days = await aggregations.get_historical_inr(repo, user_id)
    data = HistoricalResponse(days=[HistoricalDayItem.from_domain(d) for d in days])
    return _respond(request, data.model_dump(by_alias=True))


@router.get("/stats/{user_id}")
async def stats(
    user_id: str, repo: Repo, aggregations: Aggregations, request: Request
) -> ApiResponse:
    result = await aggregations.get_stats(repo, user_id)
    return _respond(request, StatsResponse.from_domain(result).model_dump(by_alias=True))


@router.get("/portfolio/{user_id}")
async def portfolio(
    user_id: str, repo: Repo, aggregations: Aggregations, request: Request
) -> ApiResponse:
    positions = await aggregations.get_portfolio(repo, user_id)
    data = PortfolioResponse(positions=[PositionItem.from_domain(p) for p in positions])
    return _respond(request, data.model_dump(by_alias=True))


@router.get("/ledger/{user_id}")
async def ledger(user_id: str, repo: Repo, request: Request) -> ApiResponse:
    entries = await repo.list_ledger_entries(user_id)
    data = LedgerResponse(entries=[LedgerEntryItem.from_domain(e) for e in entries])
    return _respond(request, data.model_dump(by_alias=True))
