"""Read-only reporting for administrators."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.common.logging import log_context
from lunch_api.common.time import local_date, utc_now
from lunch_api.features.orders.repository import OrdersRepository
from lunch_api.features.restaurants.repository import RestaurantsRepository
from lunch_api.features.users.repository import UsersRepository
from lunch_api.features.voting.repository import VotingRepository
from lunch_api.models import UserRole
from lunch_api.settings import Settings

from .schemas import DailyStats, SystemOverview, WinningRestaurant

logger = logging.getLogger(__name__)


def _rate(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 2)


class AdminService:
    """Daily participation statistics and a system-wide overview."""

    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._settings = settings
        self._now = now
        self._users = UsersRepository(session)
        self._restaurants = RestaurantsRepository(session)
        self._voting = VotingRepository(session)
        self._orders = OrdersRepository(session)

    async def get_daily_stats(self, day: date | None = None) -> DailyStats:
        """Participation for ``day``; rates are percentages of employees, rounded to 2dp."""

        target = day or local_date(self._now(), self._settings.zone)
        employees = await self._users.count(role=UserRole.EMPLOYEE)

        period = await self._voting.get_period(target)
        if period is None:
            return DailyStats(date=target, total_employees=employees)

        votes = await self._voting.count_votes(period.id)
        orders = await self._orders.count_live(voting_period_id=period.id)
        revenue = await self._orders.live_revenue(voting_period_id=period.id)

        winner = None
        if period.winner_restaurant_id is not None:
            restaurant = await self._restaurants.get(period.winner_restaurant_id)
            if restaurant is not None:
                winner = WinningRestaurant(
                    id=restaurant.id,
                    name=restaurant.name,
                    vote_count=await self._voting.count_votes(
                        period.id, restaurant_id=restaurant.id
                    ),
                )

        stats = DailyStats(
            date=target,
            total_employees=employees,
            total_votes=votes,
            participation_rate=_rate(votes, employees),
            total_orders=orders,
            order_participation_rate=_rate(orders, employees),
            total_revenue=revenue,
            winning_restaurant=winner,
        )
        logger.debug(
            "admin.daily_stats",
            extra=log_context(voting_period_id=period.id, votes=votes, orders=orders),
        )
        return stats

    async def get_system_overview(self) -> SystemOverview:
        return SystemOverview(
            total_users=await self._users.count(),
            total_active_restaurants=await self._restaurants.count_active(),
            total_orders=await self._orders.count_all(),
            total_revenue=await self._orders.live_revenue(),
        )


__all__ = ["AdminService"]
