"""Business logic for individual orders and the daily group order."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date, datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.common.logging import log_context
from lunch_api.common.money import ZERO, to_money
from lunch_api.common.time import local_date, utc_now
from lunch_api.features.restaurants.exceptions import (
    MenuItemNotFoundError,
    RestaurantNotFoundError,
)
from lunch_api.features.restaurants.repository import RestaurantsRepository
from lunch_api.features.restaurants.schemas import RestaurantOut
from lunch_api.features.voting.exceptions import VotingPeriodNotFoundError
from lunch_api.features.voting.repository import VotingRepository
from lunch_api.models import Order, OrderItem, OrderStatus, VotingPeriod
from lunch_api.settings import Settings

from .aggregation import summarize_items
from .exceptions import (
    AlreadyCancelledError,
    CannotCancelConfirmedError,
    InvalidExportFormatError,
    InvalidQuantityError,
    InvalidRestaurantError,
    ItemNotAvailableError,
    NoOrderItemsError,
    NotWinningRestaurantError,
    OrderAlreadyExistsError,
    OrderNotFoundError,
    OrderUnauthorizedError,
    VotingNotCompleteError,
)
from .export import RENDERERS, build_export
from .repository import OrdersRepository
from .schemas import GroupOrder, ItemSummary, OrderItemIn, OrderItemOut, OrderOut

logger = logging.getLogger(__name__)


def order_out(order: Order) -> OrderOut:
    """Serialize an order whose items, menu items and user are loaded."""

    return OrderOut(
        id=order.id,
        user_id=order.user_id,
        user_name=order.user.name,
        restaurant_id=order.restaurant_id,
        voting_period_id=order.voting_period_id,
        status=order.status,
        total_amount=to_money(order.total_amount),
        items=[
            OrderItemOut(
                id=item.id,
                menu_item_id=item.menu_item_id,
                menu_item_name=item.menu_item.name,
                unit_price=to_money(item.menu_item.price),
                quantity=item.quantity,
                notes=item.notes,
                subtotal=to_money(item.subtotal),
            )
            for item in order.items
        ],
        created_at=order.created_at,
    )


class OrdersService:
    """Place, cancel, confirm and aggregate orders for the winning restaurant."""

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
        self._repo = OrdersRepository(session)
        self._voting = VotingRepository(session)
        self._restaurants = RestaurantsRepository(session)

    def today(self) -> date:
        return local_date(self._now(), self._settings.zone)

    async def create_order(
        self,
        *,
        user_id: UUID,
        restaurant_id: UUID,
        items: Sequence[OrderItemIn],
        day: date | None = None,
    ) -> OrderOut:
        """Place ``user_id``'s order for the day's winning restaurant.

        The order and its items are written together; the total is the sum of
        the item subtotals (unit price x quantity).
        """
        if not items:
            raise NoOrderItemsError()

        period = await self._completed_period(day or self.today())
        if period.winner_restaurant_id != restaurant_id:
            raise NotWinningRestaurantError()

        existing = await self._repo.find_live_for_user(
            user_id=user_id, voting_period_id=period.id
        )
        if existing is not None:
            logger.info(
                "orders.create.duplicate",
                extra=log_context(user_id=user_id, order_id=existing.id),
            )
            raise OrderAlreadyExistsError()

        menu = await self._restaurants.get_menu_items([line.menu_item_id for line in items])
        now = self._now()
        order_items: list[OrderItem] = []
        total = ZERO
        for line in items:
            menu_item = menu.get(line.menu_item_id)
            if menu_item is None:
                raise MenuItemNotFoundError(details={"menu_item_id": str(line.menu_item_id)})
            if menu_item.restaurant_id != restaurant_id:
                raise InvalidRestaurantError(details={"menu_item_id": str(menu_item.id)})
            if not menu_item.is_available:
                raise ItemNotAvailableError(f"Menu item {menu_item.name} is not available")
            if line.quantity <= 0:
                raise InvalidQuantityError(details={"menu_item_id": str(menu_item.id)})

            subtotal = to_money(to_money(menu_item.price) * line.quantity)
            total += subtotal
            order_items.append(
                OrderItem(
                    menu_item_id=menu_item.id,
                    menu_item=menu_item,
                    quantity=line.quantity,
                    notes=line.notes,
                    subtotal=subtotal,
                    created_at=now,
                )
            )

        order = Order(
            user_id=user_id,
            restaurant_id=restaurant_id,
            voting_period_id=period.id,
            status=OrderStatus.PENDING,
            total_amount=to_money(total),
            items=order_items,
            created_at=now,
            updated_at=now,
        )
        await self._repo.add(order)
        logger.info(
            "orders.create.success",
            extra=log_context(
                user_id=user_id,
                order_id=order.id,
                restaurant_id=restaurant_id,
                voting_period_id=period.id,
                total_amount=str(order.total_amount),
                items=len(order_items),
            ),
        )
        return await self.get_order(order.id)

    async def get_order(self, order_id: UUID, *, user_id: UUID | None = None) -> OrderOut:
        order = await self._require(order_id, user_id=user_id)
        return order_out(order)

    async def list_user_orders(self, user_id: UUID) -> list[OrderOut]:
        orders = await self._repo.list_for_user(user_id)
        return [order_out(order) for order in orders]

    async def cancel_order(self, order_id: UUID, *, user_id: UUID) -> OrderOut:
        order = await self._require(order_id, user_id=user_id)
        if order.status == OrderStatus.CANCELLED:
            raise AlreadyCancelledError()
        if order.status == OrderStatus.CONFIRMED:
            raise CannotCancelConfirmedError()

        order.status = OrderStatus.CANCELLED
        order.updated_at = self._now()
        await self._session.flush()
        logger.info("orders.cancel.success", extra=log_context(user_id=user_id, order_id=order.id))
        return order_out(order)

    async def confirm_orders(self, day: date | None = None) -> int:
        """Mark every pending order of the day's period confirmed; returns the count."""

        target = day or self.today()
        period = await self._voting.get_period(target)
        if period is None:
            raise VotingPeriodNotFoundError(details={"date": target.isoformat()})
        confirmed = await self._repo.confirm_pending(period.id)
        logger.info(
            "orders.confirm.success",
            extra=log_context(voting_period_id=period.id, confirmed=confirmed),
        )
        return confirmed

    async def get_group_order(self, day: date | None = None) -> GroupOrder:
        target = day or self.today()
        period = await self._completed_period(target)
        restaurant = await self._restaurants.get(period.winner_restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError()

        orders = await self._repo.list_live_for_period(period.id)
        summary = summarize_items(
            (item.menu_item, item.quantity, item.subtotal)
            for order in orders
            for item in order.items
        )
        return GroupOrder(
            date=target,
            voting_period_id=period.id,
            restaurant=RestaurantOut.model_validate(restaurant),
            orders=[order_out(order) for order in orders],
            total_orders=len(orders),
            total_amount=to_money(sum((o.total_amount for o in orders), ZERO)),
            item_summary=[ItemSummary.model_validate(entry) for entry in summary],
        )

    async def export_orders(self, day: date | None = None, fmt: str = "text") -> str:
        renderer = RENDERERS.get(fmt)
        if renderer is None:
            raise InvalidExportFormatError(details={"format": fmt})
        group_order = await self.get_group_order(day)
        logger.info(
            "orders.export",
            extra=log_context(
                voting_period_id=group_order.voting_period_id,
                format=fmt,
                orders=group_order.total_orders,
            ),
        )
        return renderer(build_export(group_order))

    async def _completed_period(self, day: date) -> VotingPeriod:
        period = await self._voting.get_period(day)
        if period is None:
            raise VotingPeriodNotFoundError(details={"date": day.isoformat()})
        if not period.is_complete or period.winner_restaurant_id is None:
            raise VotingNotCompleteError()
        return period

    async def _require(self, order_id: UUID, *, user_id: UUID | None) -> Order:
        order = await self._repo.get(order_id)
        if order is None:
            raise OrderNotFoundError()
        if user_id is not None and order.user_id != user_id:
            logger.info(
                "orders.access.denied",
                extra=log_context(user_id=user_id, order_id=order_id),
            )
            raise OrderUnauthorizedError()
        return order


__all__ = ["OrdersService", "order_out"]
