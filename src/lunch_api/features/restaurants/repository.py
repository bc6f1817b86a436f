"""Restaurant and menu persistence helpers."""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.models import CartItem, MenuItem, OrderItem, Restaurant


class RestaurantsRepository:
    """Query helpers for restaurants and their menu items."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, restaurant_id: UUID) -> Restaurant | None:
        return await self._session.get(Restaurant, restaurant_id)

    async def get_by_external_id(self, external_id: str) -> Restaurant | None:
        stmt = select(Restaurant).where(Restaurant.external_id == external_id).limit(1)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_restaurants(self, *, active_only: bool = False) -> list[Restaurant]:
        stmt = select(Restaurant)
        if active_only:
            stmt = stmt.where(Restaurant.is_active.is_(True))
        stmt = stmt.order_by(Restaurant.name, Restaurant.id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_ids(self, restaurant_ids: Sequence[UUID]) -> list[Restaurant]:
        if not restaurant_ids:
            return []
        stmt = (
            select(Restaurant)
            .where(Restaurant.id.in_(list(restaurant_ids)))
            .order_by(Restaurant.name, Restaurant.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count_active(self) -> int:
        stmt = select(func.count()).select_from(Restaurant).where(Restaurant.is_active.is_(True))
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def add(self, restaurant: Restaurant) -> Restaurant:
        self._session.add(restaurant)
        await self._session.flush()
        return restaurant

    # ---- Menu items ----

    async def get_menu_item(self, item_id: UUID) -> MenuItem | None:
        return await self._session.get(MenuItem, item_id)

    async def get_menu_items(self, item_ids: Sequence[UUID]) -> dict[UUID, MenuItem]:
        if not item_ids:
            return {}
        stmt = select(MenuItem).where(MenuItem.id.in_(list(set(item_ids))))
        result = await self._session.execute(stmt)
        return {item.id: item for item in result.scalars().all()}

    async def list_menu(
        self,
        restaurant_id: UUID,
        *,
        available_only: bool = False,
        search: str | None = None,
    ) -> list[MenuItem]:
        stmt = select(MenuItem).where(MenuItem.restaurant_id == restaurant_id)
        if available_only:
            stmt = stmt.where(MenuItem.is_available.is_(True))
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(MenuItem.name).like(pattern),
                    func.lower(func.coalesce(MenuItem.description, "")).like(pattern),
                )
            )
        stmt = stmt.order_by(
            func.coalesce(MenuItem.category, ""),
            MenuItem.name,
            MenuItem.id,
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def add_menu_items(self, items: Sequence[MenuItem]) -> list[MenuItem]:
        self._session.add_all(list(items))
        await self._session.flush()
        return list(items)

    async def count_order_references(self, item_ids: Sequence[UUID]) -> dict[UUID, int]:
        if not item_ids:
            return {}
        stmt = (
            select(OrderItem.menu_item_id, func.count())
            .where(OrderItem.menu_item_id.in_(list(item_ids)))
            .group_by(OrderItem.menu_item_id)
        )
        result = await self._session.execute(stmt)
        return {menu_item_id: int(count) for menu_item_id, count in result.all()}

    async def delete_menu_items(self, item_ids: Sequence[UUID]) -> None:
        """Delete menu items together with any cart lines pointing at them."""

        if not item_ids:
            return
        await self._session.flush()
        ids = list(item_ids)
        await self._session.execute(delete(CartItem).where(CartItem.menu_item_id.in_(ids)))
        await self._session.execute(delete(MenuItem).where(MenuItem.id.in_(ids)))
        await self._session.flush()


__all__ = ["RestaurantsRepository"]
