"""Voting persistence helpers."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.common.time import normalize_utc
from lunch_api.models import DailyRestaurant, Vote, VotingPeriod


@dataclass(frozen=True, slots=True)
class VoteCount:
    restaurant_id: UUID
    votes: int
    first_vote_at: datetime


class VotingRepository:
    """Query helpers for voting periods, votes and daily restaurant sets."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ---- Periods ----

    async def get_period(self, day: date) -> VotingPeriod | None:
        stmt = (
            select(VotingPeriod)
            .where(VotingPeriod.date == day)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_period(self, period: VotingPeriod) -> VotingPeriod:
        self._session.add(period)
        await self._session.flush()
        return period

    # ---- Votes ----

    async def has_voted(self, *, user_id: UUID, voting_period_id: UUID) -> bool:
        stmt = (
            select(Vote.id)
            .where(Vote.user_id == user_id, Vote.voting_period_id == voting_period_id)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def add_vote(self, vote: Vote) -> Vote:
        self._session.add(vote)
        await self._session.flush()
        return vote

    async def tally(self, voting_period_id: UUID) -> list[VoteCount]:
        """Vote counts per restaurant, most votes first, earliest first vote breaking ties."""

        first_vote = func.min(Vote.created_at)
        votes = func.count(Vote.id)
        stmt = (
            select(Vote.restaurant_id, votes, first_vote)
            .where(Vote.voting_period_id == voting_period_id)
            .group_by(Vote.restaurant_id)
        )
        result = await self._session.execute(stmt)
        counts = [
            VoteCount(
                restaurant_id=_as_uuid(restaurant_id),
                votes=int(count),
                first_vote_at=_as_datetime(first),
            )
            for restaurant_id, count, first in result.all()
        ]
        counts.sort(key=lambda c: (-c.votes, c.first_vote_at, str(c.restaurant_id)))
        return counts

    async def count_votes(self, voting_period_id: UUID, *, restaurant_id: UUID | None = None) -> int:
        stmt = select(func.count(Vote.id)).where(Vote.voting_period_id == voting_period_id)
        if restaurant_id is not None:
            stmt = stmt.where(Vote.restaurant_id == restaurant_id)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    # ---- Daily restaurant sets ----

    async def daily_restaurant_ids(self, day: date) -> list[UUID]:
        stmt = select(DailyRestaurant.restaurant_id).where(DailyRestaurant.date == day)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def replace_daily_restaurants(self, day: date, restaurant_ids: Sequence[UUID]) -> None:
        await self._session.execute(delete(DailyRestaurant).where(DailyRestaurant.date == day))
        self._session.add_all(
            DailyRestaurant(date=day, restaurant_id=restaurant_id)
            for restaurant_id in restaurant_ids
        )
        await self._session.flush()


def _as_uuid(value: object) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def _as_datetime(value: object) -> datetime:
    # Aggregates bypass the column type, so SQLite hands back raw strings.
    if isinstance(value, datetime):
        return normalize_utc(value)
    return normalize_utc(datetime.fromisoformat(str(value)))


__all__ = ["VoteCount", "VotingRepository"]
