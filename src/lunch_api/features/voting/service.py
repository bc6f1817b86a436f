"""Business logic for daily restaurant voting."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date, datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.common.logging import log_context
from lunch_api.common.time import local_date, local_time, utc_now
from lunch_api.features.restaurants.exceptions import RestaurantNotFoundError
from lunch_api.features.restaurants.repository import RestaurantsRepository
from lunch_api.features.restaurants.schemas import RestaurantOut
from lunch_api.features.users.exceptions import UserNotFoundError
from lunch_api.models import Restaurant, User, Vote, VotingPeriod
from lunch_api.settings import Settings

from .exceptions import (
    AlreadyVotedError,
    NoVotesError,
    RestaurantNotAvailableError,
    RestaurantNotAvailableTodayError,
    VotingEndedError,
    VotingNotStartedError,
    VotingPeriodNotFoundError,
)
from .repository import VotingRepository
from .schemas import RestaurantTally, VoteReceipt, VotingResults, VotingWinner

logger = logging.getLogger(__name__)


class VotingService:
    """Run the daily vote: offered restaurants, ballots and winner resolution.

    Dates are calendar dates in the configured timezone; the voting window
    (``voting_start_time``..``voting_end_time``, inclusive) is compared with
    the wall-clock time in that same timezone.
    """

    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session = session
        self._settings = settings
        self._now = now
        self._repo = VotingRepository(session)
        self._restaurants = RestaurantsRepository(session)

    def today(self) -> date:
        return local_date(self._now(), self._settings.zone)

    # ---- Daily restaurant sets ----

    async def set_daily_restaurants(
        self, day: date, restaurant_ids: Sequence[UUID]
    ) -> list[RestaurantOut]:
        """Replace the set of restaurants offered for voting on ``day``."""

        unique_ids = list(dict.fromkeys(restaurant_ids))
        found = {r.id for r in await self._restaurants.list_by_ids(unique_ids)}
        missing = [str(rid) for rid in unique_ids if rid not in found]
        if missing:
            raise RestaurantNotFoundError(details={"restaurant_ids": missing})

        await self._repo.replace_daily_restaurants(day, unique_ids)
        logger.info(
            "voting.daily_restaurants.set",
            extra=log_context(date=day.isoformat(), count=len(unique_ids)),
        )
        return await self.get_available_restaurants(day)

    async def get_available_restaurants(self, day: date | None = None) -> list[RestaurantOut]:
        restaurants = await self._available_restaurants(day or self.today())
        return [RestaurantOut.model_validate(r) for r in restaurants]

    async def _available_restaurants(self, day: date) -> list[Restaurant]:
        daily_ids = await self._repo.daily_restaurant_ids(day)
        if daily_ids:
            restaurants = await self._restaurants.list_by_ids(daily_ids)
            return [r for r in restaurants if r.is_active]
        return await self._restaurants.list_restaurants(active_only=True)

    # ---- Periods ----

    async def get_or_create_period(self, day: date) -> VotingPeriod:
        period = await self._repo.get_period(day)
        if period is not None:
            return period

        period = VotingPeriod(
            date=day,
            start_time=self._settings.voting_start_time,
            end_time=self._settings.voting_end_time,
            is_complete=False,
        )
        try:
            async with self._session.begin_nested():
                await self._repo.add_period(period)
        except IntegrityError:
            existing = await self._repo.get_period(day)
            if existing is None:
                raise
            return existing

        logger.info(
            "voting.period.created",
            extra=log_context(voting_period_id=period.id, date=day.isoformat()),
        )
        return period

    # ---- Ballots ----

    async def cast_vote(
        self,
        *,
        user_id: UUID,
        restaurant_id: UUID,
        day: date | None = None,
    ) -> VoteReceipt:
        """Record ``user_id``'s vote and return the restaurant's running count."""

        now = self._now()
        today = self.today()
        target = day or today

        if await self._session.get(User, user_id) is None:
            raise UserNotFoundError()

        period = await self.get_or_create_period(target)
        self._ensure_window_open(period, now=now, today=today)

        if await self._repo.has_voted(user_id=user_id, voting_period_id=period.id):
            logger.info(
                "voting.vote.duplicate",
                extra=log_context(user_id=user_id, voting_period_id=period.id),
            )
            raise AlreadyVotedError()

        restaurant = await self._restaurants.get(restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError()
        if not restaurant.is_active:
            raise RestaurantNotAvailableError()

        available = await self._available_restaurants(target)
        if restaurant.id not in {r.id for r in available}:
            raise RestaurantNotAvailableTodayError()

        vote = Vote(
            user_id=user_id,
            restaurant_id=restaurant.id,
            voting_period_id=period.id,
            created_at=now,
        )
        try:
            async with self._session.begin_nested():
                await self._repo.add_vote(vote)
        except IntegrityError as exc:
            raise AlreadyVotedError() from exc

        count = await self._repo.count_votes(period.id, restaurant_id=restaurant.id)
        logger.info(
            "voting.vote.cast",
            extra=log_context(
                user_id=user_id,
                restaurant_id=restaurant.id,
                voting_period_id=period.id,
                vote_count=count,
            ),
        )
        return VoteReceipt(
            voting_period_id=period.id,
            restaurant_id=restaurant.id,
            vote_count=count,
        )

    def _ensure_window_open(self, period: VotingPeriod, *, now: datetime, today: date) -> None:
        if period.is_complete or period.date < today:
            raise VotingEndedError()
        if period.date > today:
            raise VotingNotStartedError()

        current = local_time(now, self._settings.zone)
        if current < period.start_time:
            raise VotingNotStartedError(
                details={"start_time": period.start_time.isoformat()}
            )
        if current > period.end_time:
            raise VotingEndedError(details={"end_time": period.end_time.isoformat()})

    async def has_user_voted(self, user_id: UUID, day: date | None = None) -> bool:
        period = await self._repo.get_period(day or self.today())
        if period is None:
            return False
        return await self._repo.has_voted(user_id=user_id, voting_period_id=period.id)

    async def is_voting_active(self, day: date | None = None) -> bool:
        today = self.today()
        period = await self._repo.get_period(day or today)
        if period is None:
            return False
        try:
            self._ensure_window_open(period, now=self._now(), today=today)
        except (VotingNotStartedError, VotingEndedError):
            return False
        return True

    # ---- Results ----

    async def get_results(self, day: date | None = None) -> VotingResults:
        target = day or self.today()
        period = await self._repo.get_period(target)
        if period is None:
            return VotingResults(date=target)

        counts = await self._repo.tally(period.id)
        restaurants = {
            r.id: r for r in await self._restaurants.list_by_ids([c.restaurant_id for c in counts])
        }
        tallies = [
            RestaurantTally(
                restaurant=RestaurantOut.model_validate(restaurants[c.restaurant_id]),
                vote_count=c.votes,
            )
            for c in counts
            if c.restaurant_id in restaurants
        ]
        winner = (
            RestaurantOut.model_validate(period.winner_restaurant)
            if period.winner_restaurant is not None
            else None
        )
        return VotingResults(
            date=target,
            voting_period_id=period.id,
            restaurants=tallies,
            total_votes=sum(c.votes for c in counts),
            winner=winner,
            is_complete=period.is_complete,
        )

    async def determine_winner(self, day: date | None = None) -> VotingWinner:
        """Resolve (and persist) the winner for ``day``.

        A completed period returns its stored winner; otherwise the restaurant
        with the most votes wins, ties going to the restaurant voted for first.
        """
        target = day or self.today()
        period = await self._repo.get_period(target)
        if period is None:
            raise VotingPeriodNotFoundError(details={"date": target.isoformat()})

        if period.is_complete and period.winner_restaurant_id is not None:
            winner = await self._restaurants.get(period.winner_restaurant_id)
            if winner is not None:
                votes = await self._repo.count_votes(period.id, restaurant_id=winner.id)
                return self._winner_out(period, winner, votes)

        counts = await self._repo.tally(period.id)
        if not counts:
            raise NoVotesError()

        top = counts[0]
        winner = await self._restaurants.get(top.restaurant_id)
        if winner is None:
            raise RestaurantNotFoundError()

        period.winner_restaurant_id = winner.id
        period.is_complete = True
        await self._session.flush()
        logger.info(
            "voting.winner.determined",
            extra=log_context(
                voting_period_id=period.id,
                restaurant_id=winner.id,
                vote_count=top.votes,
                date=target.isoformat(),
            ),
        )
        return self._winner_out(period, winner, top.votes)

    async def close_voting(self, day: date | None = None) -> VotingWinner:
        """Explicitly end voting for ``day`` and fix the winner."""

        result = await self.determine_winner(day)
        logger.info(
            "voting.closed",
            extra=log_context(
                voting_period_id=result.voting_period_id,
                restaurant_id=result.restaurant.id,
            ),
        )
        return result

    @staticmethod
    def _winner_out(period: VotingPeriod, winner: Restaurant, votes: int) -> VotingWinner:
        return VotingWinner(
            date=period.date,
            voting_period_id=period.id,
            restaurant=RestaurantOut.model_validate(winner),
            vote_count=votes,
        )


__all__ = ["VotingService"]
