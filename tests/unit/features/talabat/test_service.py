"""Catalog sync and group order placement against a mocked Talabat API."""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.features.orders.exceptions import NoOrderItemsError
from lunch_api.features.orders.schemas import OrderItemIn
from lunch_api.features.orders.service import OrdersService
from lunch_api.features.restaurants.service import RestaurantsService
from lunch_api.features.talabat.client import TalabatClient
from lunch_api.features.talabat.exceptions import (
    MenuItemNotLinkedError,
    RestaurantNotLinkedError,
    TalabatApiError,
)
from lunch_api.features.talabat.schemas import DeliveryAddress, DeliveryDetails
from lunch_api.features.talabat.service import TalabatService
from lunch_api.models import MenuItem, Restaurant
from lunch_api.settings import Settings

from tests.utils import (
    FrozenClock,
    create_completed_period,
    create_menu_item,
    create_restaurant,
    create_user,
)

TODAY = date(2026, 10, 19)

DETAILS = DeliveryDetails(
    delivery_address=DeliveryAddress(street="Road 1", building="12", city="Manama", area="Seef"),
    contact_phone="+97312345678",
)


class FakeTalabat:
    """Serves one restaurant and menu; records posted orders."""

    def __init__(self, *, name: str = "Taco Town", items: list[dict] | None = None) -> None:
        self.name = name
        self.items = items if items is not None else []
        self.orders: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/v1/restaurants/tt-1":
            return httpx.Response(
                200,
                json={"id": "tt-1", "name": self.name, "cuisine": ["Mexican", "Street food"]},
            )
        if path == "/v1/restaurants/tt-1/menu":
            return httpx.Response(200, json={"items": self.items})
        if path == "/v1/orders" and request.method == "POST":
            self.orders.append(json.loads(request.content))
            return httpx.Response(201, json={"orderId": "o-1", "status": "placed"})
        return httpx.Response(404, json={"message": "Not found"})

    def client(self) -> TalabatClient:
        return TalabatClient(
            base_url="https://talabat.test/v1",
            api_key="k",
            transport=httpx.MockTransport(self),
        )


def _service(
    session: AsyncSession, settings: Settings, clock: FrozenClock, fake: FakeTalabat
) -> TalabatService:
    return TalabatService(session=session, settings=settings, client=fake.client(), now=clock)


async def _linked(session: AsyncSession, item: MenuItem, external_id: str) -> MenuItem:
    item.external_id = external_id
    await session.flush()
    return item


# ---- sync_restaurant ----


@pytest.mark.asyncio
async def test_sync_creates_restaurant_with_menu(
    session: AsyncSession, settings: Settings, clock: FrozenClock
) -> None:
    fake = FakeTalabat(
        items=[
            {"id": "m-1", "name": "Taco", "price": 2.5, "category": "Mains"},
            {"id": "m-2", "name": "Nachos", "price": 1.25, "isAvailable": False},
        ]
    )

    result = await _service(session, settings, clock, fake).sync_restaurant("tt-1")

    assert result.created is True
    assert result.restaurant.external_id == "tt-1"
    assert result.restaurant.cuisine == "Mexican, Street food"
    menu = await RestaurantsService(session=session).get_menu(result.restaurant.id)
    assert {(m.name, m.price, m.external_id, m.is_available) for m in menu} == {
        ("Taco", Decimal("2.50"), "m-1", True),
        ("Nachos", Decimal("1.25"), "m-2", False),
    }


@pytest.mark.asyncio
async def test_sync_existing_restaurant_replaces_menu(
    session: AsyncSession, settings: Settings, clock: FrozenClock
) -> None:
    first = FakeTalabat(items=[{"id": "m-1", "name": "Taco", "price": 2.5}])
    created = await _service(session, settings, clock, first).sync_restaurant("tt-1")

    second = FakeTalabat(
        name="Taco Town Express",
        items=[{"id": "m-3", "name": "Burrito", "price": 4}],
    )
    result = await _service(session, settings, clock, second).sync_restaurant("tt-1")

    assert result.created is False
    assert result.restaurant.id == created.restaurant.id
    assert result.restaurant.name == "Taco Town Express"
    menu = await RestaurantsService(session=session).get_menu(result.restaurant.id)
    assert [(m.name, m.external_id) for m in menu] == [("Burrito", "m-3")]


@pytest.mark.asyncio
async def test_sync_with_empty_remote_menu_keeps_local_menu(
    session: AsyncSession, settings: Settings, clock: FrozenClock
) -> None:
    first = FakeTalabat(items=[{"id": "m-1", "name": "Taco", "price": 2.5}])
    created = await _service(session, settings, clock, first).sync_restaurant("tt-1")

    result = await _service(session, settings, clock, FakeTalabat()).sync_restaurant("tt-1")

    assert result.menu_items == []
    menu = await RestaurantsService(session=session).get_menu(created.restaurant.id)
    assert [m.external_id for m in menu] == ["m-1"]


@pytest.mark.asyncio
async def test_sync_unknown_restaurant_surfaces_api_error(
    session: AsyncSession, settings: Settings, clock: FrozenClock
) -> None:
    with pytest.raises(TalabatApiError) as exc_info:
        await _service(session, settings, clock, FakeTalabat()).sync_restaurant("nope")

    assert exc_info.value.upstream_status == 404


# ---- place_group_order ----


async def _winning_restaurant(session: AsyncSession, *, linked: bool = True) -> Restaurant:
    restaurant = await create_restaurant(session)
    if linked:
        restaurant.external_id = "tt-1"
    await create_completed_period(session, day=TODAY, winner=restaurant)
    return restaurant


@pytest.mark.asyncio
async def test_group_order_sums_quantities_and_keeps_notes(
    session: AsyncSession, settings: Settings, clock: FrozenClock
) -> None:
    restaurant = await _winning_restaurant(session)
    taco = await _linked(session, await create_menu_item(session, restaurant, name="Taco"), "m-1")
    burrito = await _linked(
        session, await create_menu_item(session, restaurant, name="Burrito"), "m-3"
    )
    alice = await create_user(session, name="Alice")
    bob = await create_user(session, name="Bob")
    orders = OrdersService(session=session, settings=settings, now=clock)
    await orders.create_order(
        user_id=alice.id,
        restaurant_id=restaurant.id,
        items=[OrderItemIn(menu_item_id=taco.id, quantity=2, notes="extra salsa")],
    )
    await orders.create_order(
        user_id=bob.id,
        restaurant_id=restaurant.id,
        items=[
            OrderItemIn(menu_item_id=taco.id, quantity=1, notes="no onions"),
            OrderItemIn(menu_item_id=burrito.id, quantity=1),
        ],
    )
    fake = FakeTalabat()

    response = await _service(session, settings, clock, fake).place_group_order(DETAILS)

    assert response.order_id == "o-1"
    [sent] = fake.orders
    assert sent["restaurantId"] == "tt-1"
    assert sent["paymentMethod"] == "cash"
    lines = {line["itemId"]: line for line in sent["items"]}
    assert lines["m-1"]["quantity"] == 3
    assert sorted(lines["m-1"]["specialInstructions"].split("\n")) == [
        "Alice: extra salsa",
        "Bob: no onions",
    ]
    assert lines["m-3"] == {"itemId": "m-3", "quantity": 1}


@pytest.mark.asyncio
async def test_group_order_requires_linked_restaurant(
    session: AsyncSession, settings: Settings, clock: FrozenClock
) -> None:
    await _winning_restaurant(session, linked=False)
    fake = FakeTalabat()

    with pytest.raises(RestaurantNotLinkedError):
        await _service(session, settings, clock, fake).place_group_order(DETAILS)
    assert fake.orders == []


@pytest.mark.asyncio
async def test_group_order_without_orders_is_rejected(
    session: AsyncSession, settings: Settings, clock: FrozenClock
) -> None:
    await _winning_restaurant(session)

    with pytest.raises(NoOrderItemsError):
        await _service(session, settings, clock, FakeTalabat()).place_group_order(DETAILS)


@pytest.mark.asyncio
async def test_group_order_requires_linked_items(
    session: AsyncSession, settings: Settings, clock: FrozenClock
) -> None:
    restaurant = await _winning_restaurant(session)
    taco = await create_menu_item(session, restaurant, name="Taco")
    alice = await create_user(session, name="Alice")
    await OrdersService(session=session, settings=settings, now=clock).create_order(
        user_id=alice.id,
        restaurant_id=restaurant.id,
        items=[OrderItemIn(menu_item_id=taco.id, quantity=1)],
    )
    fake = FakeTalabat()

    with pytest.raises(MenuItemNotLinkedError) as exc_info:
        await _service(session, settings, clock, fake).place_group_order(DETAILS)

    assert exc_info.value.details == {"menu_item_id": str(taco.id)}
    assert fake.orders == []
