"""Business logic for restaurants and their menus."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.common.logging import log_context
from lunch_api.common.money import to_money
from lunch_api.models import MenuItem, Restaurant

from .exceptions import (
    InvalidPriceError,
    MenuItemInUseError,
    MenuItemNotFoundError,
    NoMenuItemsError,
    RestaurantNotFoundError,
)
from .repository import RestaurantsRepository
from .schemas import (
    MenuItemCreate,
    MenuItemOut,
    MenuItemUpdate,
    RestaurantCreate,
    RestaurantOut,
    RestaurantUpdate,
)

logger = logging.getLogger(__name__)


def _validated_price(price: Decimal, *, index: int | None = None) -> Decimal:
    if price < 0:
        details: dict[str, object] = {"price": str(price)}
        if index is not None:
            details["index"] = index
        raise InvalidPriceError(details=details)
    return to_money(price)


class RestaurantsService:
    """Manage restaurants and menu items."""

    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._repo = RestaurantsRepository(session)

    # ---- Restaurants ----

    async def create_restaurant(self, payload: RestaurantCreate) -> RestaurantOut:
        restaurant = Restaurant(
            name=payload.name.strip(),
            cuisine=payload.cuisine,
            description=payload.description,
            image_url=payload.image_url,
            is_active=payload.is_active,
            external_id=payload.external_id,
        )
        await self._repo.add(restaurant)
        logger.info(
            "restaurants.create.success",
            extra=log_context(restaurant_id=restaurant.id),
        )
        return RestaurantOut.model_validate(restaurant)

    async def get_restaurant(self, restaurant_id: UUID) -> RestaurantOut:
        restaurant = await self.require_restaurant(restaurant_id)
        return RestaurantOut.model_validate(restaurant)

    async def list_restaurants(self, *, active_only: bool = False) -> list[RestaurantOut]:
        restaurants = await self._repo.list_restaurants(active_only=active_only)
        return [RestaurantOut.model_validate(r) for r in restaurants]

    async def update_restaurant(
        self, restaurant_id: UUID, payload: RestaurantUpdate
    ) -> RestaurantOut:
        restaurant = await self.require_restaurant(restaurant_id)
        changes = payload.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if field == "name" and value is None:
                continue
            setattr(restaurant, field, value)
        await self._session.flush()
        logger.info(
            "restaurants.update.success",
            extra=log_context(restaurant_id=restaurant.id, fields=",".join(sorted(changes))),
        )
        return RestaurantOut.model_validate(restaurant)

    async def require_restaurant(self, restaurant_id: UUID) -> Restaurant:
        restaurant = await self._repo.get(restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError()
        return restaurant

    # ---- Menu items ----

    async def create_menu_item(self, restaurant_id: UUID, payload: MenuItemCreate) -> MenuItemOut:
        await self.require_restaurant(restaurant_id)
        item = self._build_item(restaurant_id, payload, price=_validated_price(payload.price))
        await self._repo.add_menu_items([item])
        logger.info(
            "menu.item.create.success",
            extra=log_context(restaurant_id=restaurant_id, menu_item_id=str(item.id)),
        )
        return MenuItemOut.model_validate(item)

    async def get_menu_item(self, item_id: UUID) -> MenuItemOut:
        return MenuItemOut.model_validate(await self.require_menu_item(item_id))

    async def get_menu(
        self,
        restaurant_id: UUID,
        *,
        available_only: bool = False,
        search: str | None = None,
        tags: Sequence[str] | None = None,
    ) -> list[MenuItemOut]:
        """Return the menu ordered by category then name.

        ``search`` is a case-insensitive substring match over name and
        description; ``tags`` keeps items carrying at least one requested tag.
        """
        await self.require_restaurant(restaurant_id)
        term = (search or "").strip() or None
        items = await self._repo.list_menu(
            restaurant_id, available_only=available_only, search=term
        )
        wanted = {tag.strip().lower() for tag in (tags or []) if tag and tag.strip()}
        if wanted:
            items = [item for item in items if wanted.intersection(item.tags or [])]
        return [MenuItemOut.model_validate(item) for item in items]

    async def update_menu_item(self, item_id: UUID, payload: MenuItemUpdate) -> MenuItemOut:
        item = await self.require_menu_item(item_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("price") is not None:
            changes["price"] = _validated_price(changes["price"])
        for field, value in changes.items():
            if field in {"name", "price", "tags", "is_available"} and value is None:
                continue
            setattr(item, field, list(value) if field == "tags" else value)
        await self._session.flush()
        logger.info(
            "menu.item.update.success",
            extra=log_context(restaurant_id=item.restaurant_id, menu_item_id=str(item.id)),
        )
        return MenuItemOut.model_validate(item)

    async def delete_menu_item(self, item_id: UUID) -> None:
        item = await self.require_menu_item(item_id)
        references = await self._repo.count_order_references([item.id])
        if references.get(item.id):
            raise MenuItemInUseError(details={"orders": references[item.id]})
        await self._repo.delete_menu_items([item.id])
        logger.info(
            "menu.item.delete.success",
            extra=log_context(restaurant_id=item.restaurant_id, menu_item_id=str(item_id)),
        )

    async def bulk_upload_menu(
        self, restaurant_id: UUID, items: Sequence[MenuItemCreate]
    ) -> list[MenuItemOut]:
        await self.require_restaurant(restaurant_id)
        if not items:
            raise NoMenuItemsError()
        rows = [
            self._build_item(restaurant_id, payload, price=_validated_price(payload.price, index=i))
            for i, payload in enumerate(items)
        ]
        await self._repo.add_menu_items(rows)
        logger.info(
            "menu.bulk_upload.success",
            extra=log_context(restaurant_id=restaurant_id, count=len(rows)),
        )
        return [MenuItemOut.model_validate(row) for row in rows]

    async def replace_menu(
        self, restaurant_id: UUID, items: Sequence[MenuItemCreate]
    ) -> list[MenuItemOut]:
        """Swap the current menu for ``items``.

        Items that orders still reference are kept but marked unavailable.
        """
        await self.require_restaurant(restaurant_id)
        if not items:
            raise NoMenuItemsError()
        for i, payload in enumerate(items):
            _validated_price(payload.price, index=i)

        current = await self._repo.list_menu(restaurant_id)
        references = await self._repo.count_order_references([item.id for item in current])
        retired = [item for item in current if references.get(item.id)]
        for item in retired:
            item.is_available = False
        await self._repo.delete_menu_items(
            [item.id for item in current if not references.get(item.id)]
        )

        created = await self.bulk_upload_menu(restaurant_id, items)
        logger.info(
            "menu.replace.success",
            extra=log_context(
                restaurant_id=restaurant_id,
                created_count=len(created),
                retired=len(retired),
                removed=len(current) - len(retired),
            ),
        )
        return created

    async def require_menu_item(self, item_id: UUID) -> MenuItem:
        item = await self._repo.get_menu_item(item_id)
        if item is None:
            raise MenuItemNotFoundError()
        return item

    @staticmethod
    def _build_item(restaurant_id: UUID, payload: MenuItemCreate, *, price: Decimal) -> MenuItem:
        return MenuItem(
            restaurant_id=restaurant_id,
            name=payload.name.strip(),
            description=payload.description,
            price=price,
            category=payload.category,
            tags=list(payload.tags),
            image_url=payload.image_url,
            is_available=payload.is_available,
            external_id=payload.external_id,
        )


__all__ = ["RestaurantsService"]
