"""Order persistence helpers."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.common.money import to_money
from lunch_api.models import Order, OrderStatus


class OrdersRepository:
    """Query helpers for orders and their items."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, order_id: UUID) -> Order | None:
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_live_for_user(self, *, user_id: UUID, voting_period_id: UUID) -> Order | None:
        """Return the user's non-cancelled order for the period, if any."""

        stmt = (
            select(Order)
            .where(
                Order.user_id == user_id,
                Order.voting_period_id == voting_period_id,
                Order.status != OrderStatus.CANCELLED,
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: UUID) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_live_for_period(self, voting_period_id: UUID) -> list[Order]:
        stmt = (
            select(Order)
            .where(
                Order.voting_period_id == voting_period_id,
                Order.status != OrderStatus.CANCELLED,
            )
            .order_by(Order.created_at, Order.id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def add(self, order: Order) -> Order:
        self._session.add(order)
        await self._session.flush()
        return order

    async def confirm_pending(self, voting_period_id: UUID) -> int:
        stmt = (
            update(Order)
            .where(
                Order.voting_period_id == voting_period_id,
                Order.status == OrderStatus.PENDING,
            )
            .values(status=OrderStatus.CONFIRMED)
            .execution_options(synchronize_session="fetch")
        )
        result = await self._session.execute(stmt)
        return int(result.rowcount or 0)

    # ---- Reporting ----

    async def count_live(self, *, voting_period_id: UUID | None = None) -> int:
        stmt = select(func.count(Order.id)).where(Order.status != OrderStatus.CANCELLED)
        if voting_period_id is not None:
            stmt = stmt.where(Order.voting_period_id == voting_period_id)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def count_all(self) -> int:
        result = await self._session.execute(select(func.count(Order.id)))
        return int(result.scalar_one())

    async def live_revenue(self, *, voting_period_id: UUID | None = None) -> Decimal:
        stmt = select(func.sum(Order.total_amount)).where(Order.status != OrderStatus.CANCELLED)
        if voting_period_id is not None:
            stmt = stmt.where(Order.voting_period_id == voting_period_id)
        result = await self._session.execute(stmt)
        return to_money(result.scalar_one_or_none())


__all__ = ["OrdersRepository"]
