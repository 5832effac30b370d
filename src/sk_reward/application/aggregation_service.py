"""RewardAggregationService — read-side reports recomputed from the event log.

No materialized balances: every call replays the user's events through the
price source. Per-symbol price failures are logged and skipped; they never
abort a report.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from src.sk_common.datetime_utils import start_of_utc_day, utc_now
from src.sk_common.errors import PriceUnavailableError
from src.sk_common.money import ZERO, quantize_money
from src.sk_pricing.domain.price_source import PriceSourceProtocol
from src.sk_reward.domain.aggregation import net_quantity_by_day, net_quantity_by_symbol
from src.sk_reward.domain.models import (
    HistoricalDayValue,
    PortfolioPosition,
    RewardEvent,
    RewardStats,
)
from src.sk_reward.domain.repository import RewardRepositoryProtocol

logger = logging.getLogger(__name__)


class RewardAggregationService:
    def __init__(
        self,
        price_source: PriceSourceProtocol,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._prices = price_source
        self._clock = clock

    async def get_today_rewards(
        self, repo: RewardRepositoryProtocol, user_id: str
    ) -> list[RewardEvent]:
        today = start_of_utc_day(self._clock()).date()
        return await repo.list_by_user_and_date(user_id, today)

    async def get_historical_inr(
        self, repo: RewardRepositoryProtocol, user_id: str
    ) -> list[HistoricalDayValue]:
        cutoff = start_of_utc_day(self._clock())
        events = await repo.list_before_date(user_id, cutoff)

        result: list[HistoricalDayValue] = []
        for day, holdings in sorted(net_quantity_by_day(events).items()):
            total = ZERO
            for symbol, quantity in sorted(holdings.items()):
                try:
                    price = await self._prices.get_historical_price(symbol, day)
                except PriceUnavailableError as exc:
                    logger.warning(
                        "Historical price unavailable, using 0: symbol=%s date=%s err=%s",
                        symbol,
                        day.isoformat(),
                        exc.message,
                    )
                    continue
                total += price * quantity
            result.append(HistoricalDayValue(date=day.isoformat(), total_inr=quantize_money(total)))
        return result

    async def get_stats(self, repo: RewardRepositoryProtocol, user_id: str) -> RewardStats:
        today_events = await self.get_today_rewards(repo, user_id)
        positions = await self.get_portfolio(repo, user_id)
        portfolio_value = sum((p.value for p in positions), ZERO)
        return RewardStats(
            total_shares_today=net_quantity_by_symbol(today_events),
            portfolio_value=quantize_money(portfolio_value),
        )

    async def get_portfolio(
        self, repo: RewardRepositoryProtocol, user_id: str
    ) -> list[PortfolioPosition]:
        holdings = net_quantity_by_symbol(await repo.list_all(user_id))
        return await self._value_holdings(holdings)

    async def _value_holdings(self, holdings: dict[str, Decimal]) -> list[PortfolioPosition]:
        positions: list[PortfolioPosition] = []
        for symbol, quantity in sorted(holdings.items()):
            try:
                quote = await self._prices.get_latest_price(symbol)
            except PriceUnavailableError as exc:
                logger.warning(
                    "Latest price unavailable, omitting position: symbol=%s err=%s",
                    symbol,
                    exc.message,
                )
                continue
            positions.append(
                PortfolioPosition(
                    symbol=symbol,
                    quantity=quantity,
                    price=quote.price,
                    value=quantize_money(quote.price * quantity),
                )
            )
        return positions
