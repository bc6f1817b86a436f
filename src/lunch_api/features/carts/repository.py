"""Cart persistence helpers."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lunch_api.models import Cart, CartItem


class CartsRepository:
    """Query helpers for carts and cart items."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_cart(self, *, group_id: UUID, user_id: UUID) -> Cart | None:
        stmt = (
            select(Cart)
            .where(Cart.group_id == group_id, Cart.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_group(self, group_id: UUID) -> list[Cart]:
        stmt = (
            select(Cart)
            .where(Cart.group_id == group_id)
            .order_by(Cart.created_at, Cart.id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_item(self, item_id: UUID) -> CartItem | None:
        stmt = (
            select(CartItem)
            .options(selectinload(CartItem.cart))
            .where(CartItem.id == item_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_cart(self, cart: Cart) -> Cart:
        self._session.add(cart)
        await self._session.flush()
        return cart

    async def add_item(self, item: CartItem) -> CartItem:
        self._session.add(item)
        await self._session.flush()
        return item

    async def delete_item(self, item: CartItem) -> None:
        await self._session.delete(item)
        await self._session.flush()


__all__ = ["CartsRepository"]
