"""Business logic for group carts."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.common.logging import log_context
from lunch_api.common.money import ZERO, to_money
from lunch_api.common.time import utc_now
from lunch_api.features.groups.exceptions import GroupClosedError, NotGroupMemberError
from lunch_api.features.groups.lifecycle import is_expired, load_group
from lunch_api.features.orders.aggregation import summarize_items
from lunch_api.features.orders.exceptions import InvalidQuantityError, InvalidRestaurantError
from lunch_api.features.orders.schemas import ItemSummary
from lunch_api.features.restaurants.exceptions import MenuItemNotFoundError
from lunch_api.features.restaurants.repository import RestaurantsRepository
from lunch_api.models import Cart, CartItem, Group
from lunch_api.settings import Settings

from .exceptions import CartItemNotFoundError, NotCartOwnerError
from .repository import CartsRepository
from .schemas import CartItemOut, CartOut, GroupCart, GroupOrderSummary, UserTotal

logger = logging.getLogger(__name__)


def _line_subtotal(item: CartItem) -> Decimal:
    return to_money(to_money(item.menu_item.price) * item.quantity)


def cart_out(cart: Cart) -> CartOut:
    items = [
        CartItemOut(
            id=item.id,
            menu_item_id=item.menu_item_id,
            name=item.menu_item.name,
            unit_price=to_money(item.menu_item.price),
            quantity=item.quantity,
            subtotal=_line_subtotal(item),
            added_at=item.added_at,
        )
        for item in cart.items
    ]
    return CartOut(
        id=cart.id,
        group_id=cart.group_id,
        user_id=cart.user_id,
        user_name=cart.user.name,
        items=items,
        total=to_money(sum((item.subtotal for item in items), ZERO)),
    )


class CartsService:
    """Build per-member carts while a group is open and aggregate them for the restaurant."""

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
        self._repo = CartsRepository(session)
        self._restaurants = RestaurantsRepository(session)

    async def add_to_cart(
        self,
        group_id: UUID,
        *,
        user_id: UUID,
        menu_item_id: UUID,
        quantity: int,
    ) -> CartOut:
        self._check_quantity(quantity)
        now = self._now()
        group = await self._open_group(group_id, now=now)
        if not group.is_member(user_id):
            raise NotGroupMemberError()

        menu_item = await self._restaurants.get_menu_item(menu_item_id)
        if menu_item is None:
            raise MenuItemNotFoundError()
        if menu_item.restaurant_id != group.restaurant_id:
            raise InvalidRestaurantError("Menu item does not belong to this restaurant")

        cart = await self._get_or_create_cart(group.id, user_id, now=now)
        item = await self._repo.add_item(
            CartItem(cart_id=cart.id, menu_item_id=menu_item.id, quantity=quantity, added_at=now)
        )
        logger.info(
            "cart.item.added",
            extra=log_context(
                group_id=group.id,
                user_id=user_id,
                cart_item_id=str(item.id),
                menu_item_id=str(menu_item.id),
                quantity=quantity,
            ),
        )
        return cart_out(await self._reload_cart(group.id, user_id))

    async def update_quantity(self, item_id: UUID, *, user_id: UUID, quantity: int) -> CartOut:
        self._check_quantity(quantity)
        item = await self._owned_item(item_id, user_id=user_id)
        item.quantity = quantity
        await self._session.flush()
        logger.info(
            "cart.item.updated",
            extra=log_context(
                group_id=item.cart.group_id,
                user_id=user_id,
                cart_item_id=str(item.id),
                quantity=quantity,
            ),
        )
        return cart_out(await self._reload_cart(item.cart.group_id, user_id))

    async def remove_from_cart(self, item_id: UUID, *, user_id: UUID) -> None:
        item = await self._owned_item(item_id, user_id=user_id)
        group_id = item.cart.group_id
        await self._repo.delete_item(item)
        logger.info(
            "cart.item.removed",
            extra=log_context(group_id=group_id, user_id=user_id, cart_item_id=str(item_id)),
        )

    async def get_group_cart(self, group_id: UUID, *, user_id: UUID) -> GroupCart:
        group = await self._visible_group(group_id, user_id=user_id)
        carts = [cart_out(cart) for cart in await self._repo.list_for_group(group.id)]
        totals = [UserTotal(user_id=c.user_id, user_name=c.user_name, total=c.total) for c in carts]
        return GroupCart(
            group_id=group.id,
            carts=carts,
            user_totals=totals,
            group_total=to_money(sum((t.total for t in totals), ZERO)),
        )

    async def get_order_summary(self, group_id: UUID, *, user_id: UUID) -> GroupOrderSummary:
        """Sum every cart line of the group per menu item, largest quantity first."""

        group = await self._visible_group(group_id, user_id=user_id)
        carts = await self._repo.list_for_group(group.id)
        summary = summarize_items(
            (item.menu_item, item.quantity, _line_subtotal(item))
            for cart in carts
            for item in cart.items
        )
        return GroupOrderSummary(
            group_id=group.id,
            restaurant_id=group.restaurant_id,
            restaurant_name=group.restaurant.name,
            is_closed=group.is_closed,
            participants=sum(1 for cart in carts if cart.items),
            items=[ItemSummary.model_validate(entry) for entry in summary],
            total_quantity=sum(entry.total_quantity for entry in summary),
            total_amount=to_money(sum((entry.total_amount for entry in summary), ZERO)),
        )

    # ---- Helpers ----

    def _check_quantity(self, quantity: int) -> None:
        limit = self._settings.cart_max_quantity
        if quantity < 1 or quantity > limit:
            raise InvalidQuantityError(f"Quantity must be between 1 and {limit}")

    async def _open_group(self, group_id: UUID, *, now: datetime) -> Group:
        group = await load_group(self._session, group_id, now=now)
        if group.is_closed or is_expired(group, now):
            raise GroupClosedError()
        return group

    async def _visible_group(self, group_id: UUID, *, user_id: UUID) -> Group:
        group = await load_group(self._session, group_id, now=self._now())
        if group.owner_id != user_id and not group.is_member(user_id):
            raise NotGroupMemberError()
        return group

    async def _owned_item(self, item_id: UUID, *, user_id: UUID) -> CartItem:
        item = await self._repo.get_item(item_id)
        if item is None:
            raise CartItemNotFoundError()
        if item.cart.user_id != user_id:
            raise NotCartOwnerError()
        await self._open_group(item.cart.group_id, now=self._now())
        return item

    async def _get_or_create_cart(self, group_id: UUID, user_id: UUID, *, now: datetime) -> Cart:
        cart = await self._repo.get_cart(group_id=group_id, user_id=user_id)
        if cart is not None:
            return cart
        cart = Cart(group_id=group_id, user_id=user_id, created_at=now)
        try:
            async with self._session.begin_nested():
                await self._repo.add_cart(cart)
        except IntegrityError:
            existing = await self._repo.get_cart(group_id=group_id, user_id=user_id)
            if existing is None:
                raise
            return existing
        return cart

    async def _reload_cart(self, group_id: UUID, user_id: UUID) -> Cart:
        cart = await self._repo.get_cart(group_id=group_id, user_id=user_id)
        if cart is None:
            raise CartItemNotFoundError()
        return cart


__all__ = ["CartsService", "cart_out"]
