"""Seed helpers shared by the test suite."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.models import MenuItem, Restaurant, User, UserRole, VotingPeriod


class FrozenClock:
    """Callable clock injected into services; advance it to move time forward."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now

    def set(self, now: datetime) -> datetime:
        self.now = now
        return self.now


async def create_user(
    session: AsyncSession,
    *,
    name: str = "Alice",
    email: str | None = None,
    role: UserRole = UserRole.EMPLOYEE,
) -> User:
    address = email or f"{name.lower().replace(' ', '.')}-{uuid4().hex[:8]}@example.com"
    user = User(
        email=address,
        email_canonical=User.canonicalize_email(address),
        name=name,
        role=role,
        is_verified=True,
    )
    session.add(user)
    await session.flush()
    return user


async def create_restaurant(
    session: AsyncSession,
    *,
    name: str = "Taco Town",
    cuisine: str | None = "Mexican",
    is_active: bool = True,
) -> Restaurant:
    restaurant = Restaurant(name=name, cuisine=cuisine, is_active=is_active)
    session.add(restaurant)
    await session.flush()
    return restaurant


async def create_menu_item(
    session: AsyncSession,
    restaurant: Restaurant,
    *,
    name: str = "Taco",
    price: str = "4.50",
    category: str | None = None,
    tags: list[str] | None = None,
    description: str | None = None,
    is_available: bool = True,
) -> MenuItem:
    item = MenuItem(
        restaurant_id=restaurant.id,
        name=name,
        description=description,
        price=Decimal(price),
        category=category,
        tags=list(tags or []),
        is_available=is_available,
    )
    session.add(item)
    await session.flush()
    return item


async def create_completed_period(
    session: AsyncSession,
    *,
    day: date,
    winner: Restaurant | None,
) -> VotingPeriod:
    """A voting period that already picked ``winner``."""

    period = VotingPeriod(
        date=day,
        start_time=time(9, 0),
        end_time=time(11, 0),
        is_complete=winner is not None,
        winner_restaurant_id=winner.id if winner is not None else None,
    )
    session.add(period)
    await session.flush()
    return period
