"""Sync Talabat restaurants into the catalog and place the day's group order.

A restaurant is matched to its Talabat counterpart through ``external_id``.
Syncing an unknown restaurant creates it; syncing a known one refreshes its
details and replaces its menu (items still referenced by orders are retired,
not deleted).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.common.logging import log_context
from lunch_api.common.time import utc_now
from lunch_api.features.orders.exceptions import NoOrderItemsError
from lunch_api.features.orders.service import OrdersService
from lunch_api.features.restaurants.repository import RestaurantsRepository
from lunch_api.features.restaurants.schemas import (
    MenuItemCreate,
    MenuItemOut,
    RestaurantCreate,
    RestaurantOut,
    RestaurantUpdate,
)
from lunch_api.features.restaurants.service import RestaurantsService
from lunch_api.settings import Settings

from .client import TalabatClient
from .exceptions import MenuItemNotLinkedError, RestaurantNotLinkedError
from .schemas import (
    DeliveryDetails,
    RestaurantSync,
    TalabatMenuItem,
    TalabatOrderLine,
    TalabatOrderRequest,
    TalabatOrderResponse,
    TalabatRestaurant,
)

logger = logging.getLogger(__name__)


def _cuisine(remote: TalabatRestaurant) -> str | None:
    joined = ", ".join(c.strip() for c in remote.cuisine if c and c.strip())
    return joined[:100] or None


def _menu_item(remote: TalabatMenuItem) -> MenuItemCreate:
    return MenuItemCreate(
        name=remote.name,
        description=remote.description,
        price=remote.price,
        category=remote.category,
        image_url=remote.image,
        is_available=remote.is_available,
        external_id=remote.id,
    )


class TalabatService:
    """Bridge between the local catalog/orders and the Talabat API."""

    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        client: TalabatClient,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session = session
        self._settings = settings
        self._client = client
        self._now = now
        self._restaurants = RestaurantsService(session=session)
        self._repo = RestaurantsRepository(session)

    async def sync_restaurant(self, talabat_id: str) -> RestaurantSync:
        remote = await self._client.get_restaurant(talabat_id)
        remote_menu = await self._client.get_menu(talabat_id)
        items = [_menu_item(row) for row in remote_menu]

        existing = await self._repo.get_by_external_id(remote.id)
        menu: list[MenuItemOut] = []
        if existing is None:
            restaurant = await self._restaurants.create_restaurant(
                RestaurantCreate(
                    name=remote.name,
                    cuisine=_cuisine(remote),
                    image_url=remote.logo,
                    is_active=remote.is_open,
                    external_id=remote.id,
                )
            )
            if items:
                menu = await self._restaurants.bulk_upload_menu(restaurant.id, items)
        else:
            restaurant = await self._restaurants.update_restaurant(
                existing.id,
                RestaurantUpdate(
                    name=remote.name,
                    cuisine=_cuisine(remote),
                    image_url=remote.logo,
                    is_active=remote.is_open,
                ),
            )
            # An empty remote menu leaves the local one untouched.
            if items:
                menu = await self._restaurants.replace_menu(restaurant.id, items)

        logger.info(
            "talabat.sync.success",
            extra=log_context(
                restaurant_id=restaurant.id,
                talabat_id=remote.id,
                new_restaurant=existing is None,
                items=len(menu),
            ),
        )
        return RestaurantSync(restaurant=restaurant, menu_items=menu, created=existing is None)

    async def place_group_order(
        self, details: DeliveryDetails, day: date | None = None
    ) -> TalabatOrderResponse:
        """Send the day's live orders to Talabat as one delivery order.

        Quantities are summed per Talabat item; each person's notes are kept
        as ``"<name>: <notes>"`` lines in the item's special instructions.
        """

        orders = OrdersService(session=self._session, settings=self._settings, now=self._now)
        group_order = await orders.get_group_order(day)
        restaurant: RestaurantOut = group_order.restaurant
        if not restaurant.external_id:
            raise RestaurantNotLinkedError(details={"restaurant_id": str(restaurant.id)})
        if not group_order.orders:
            raise NoOrderItemsError()

        menu_items = await self._repo.get_menu_items(
            [item.menu_item_id for order in group_order.orders for item in order.items]
        )
        quantities: dict[str, int] = {}
        notes: dict[str, list[str]] = {}
        for order in group_order.orders:
            for item in order.items:
                menu_item = menu_items.get(item.menu_item_id)
                external_id = menu_item.external_id if menu_item is not None else None
                if not external_id:
                    raise MenuItemNotLinkedError(
                        details={"menu_item_id": str(item.menu_item_id)}
                    )
                quantities[external_id] = quantities.get(external_id, 0) + item.quantity
                if item.notes:
                    notes.setdefault(external_id, []).append(f"{order.user_name}: {item.notes}")

        request = TalabatOrderRequest(
            restaurant_id=restaurant.external_id,
            items=[
                TalabatOrderLine(
                    item_id=external_id,
                    quantity=quantity,
                    special_instructions="\n".join(notes.get(external_id, [])) or None,
                )
                for external_id, quantity in quantities.items()
            ],
            delivery_address=details.delivery_address,
            contact_phone=details.contact_phone,
            payment_method=details.payment_method,
            scheduled_time=details.scheduled_time,
        )
        response = await self._client.place_order(request)
        logger.info(
            "talabat.order.placed",
            extra=log_context(
                restaurant_id=restaurant.id,
                voting_period_id=group_order.voting_period_id,
                talabat_order_id=response.order_id,
                lines=len(request.items),
            ),
        )
        return response


__all__ = ["TalabatService"]
