"""Daily voting: offered restaurants, voting periods and votes."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Time, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lunch_api.common.time import utc_now
from lunch_api.db import Base, UTCDateTime, UUIDPrimaryKeyMixin

from .restaurant import Restaurant


class DailyRestaurant(Base):
    """Restaurant offered for voting on a given date."""

    __tablename__ = "daily_restaurants"

    date: Mapped[dt.date] = mapped_column(Date, primary_key=True)
    restaurant_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("restaurants.id", ondelete="CASCADE"), primary_key=True
    )


class VotingPeriod(UUIDPrimaryKeyMixin, Base):
    """One voting window per calendar date."""

    __tablename__ = "voting_periods"

    date: Mapped[dt.date] = mapped_column(Date, nullable=False, unique=True)
    start_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    end_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    winner_restaurant_id: Mapped[UUID | None] = mapped_column(
        Uuid(), ForeignKey("restaurants.id", ondelete="SET NULL"), nullable=True
    )
    is_complete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now)

    winner_restaurant: Mapped[Restaurant | None] = relationship(Restaurant, lazy="selectin")


class Vote(UUIDPrimaryKeyMixin, Base):
    """A user's single vote within a voting period."""

    __tablename__ = "votes"

    user_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    restaurant_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False
    )
    voting_period_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("voting_periods.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now)

    __table_args__ = (UniqueConstraint("user_id", "voting_period_id"),)


__all__ = ["DailyRestaurant", "Vote", "VotingPeriod"]
