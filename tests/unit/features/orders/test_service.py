"""Tests for individual orders and the daily group order."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.common.errors import status_for_code
from lunch_api.features.orders.exceptions import (
    AlreadyCancelledError,
    CannotCancelConfirmedError,
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
from lunch_api.features.orders.schemas import OrderItemIn
from lunch_api.features.orders.service import OrdersService
from lunch_api.features.restaurants.exceptions import MenuItemNotFoundError
from lunch_api.features.voting.exceptions import VotingPeriodNotFoundError
from lunch_api.models import MenuItem, OrderStatus, Restaurant, User
from lunch_api.settings import Settings

from tests.utils import (
    FrozenClock,
    create_completed_period,
    create_menu_item,
    create_restaurant,
    create_user,
)

TODAY = date(2026, 10, 19)


@dataclass
class Lunch:
    alice: User
    bob: User
    restaurant: Restaurant
    taco: MenuItem
    burrito: MenuItem


@pytest.fixture
def service(session: AsyncSession, settings: Settings, clock: FrozenClock) -> OrdersService:
    return OrdersService(session=session, settings=settings, now=clock)


@pytest_asyncio.fixture
async def lunch(session: AsyncSession) -> Lunch:
    restaurant = await create_restaurant(session)
    lunch = Lunch(
        alice=await create_user(session, name="Alice"),
        bob=await create_user(session, name="Bob"),
        restaurant=restaurant,
        taco=await create_menu_item(session, restaurant, name="Taco", price="4.50"),
        burrito=await create_menu_item(session, restaurant, name="Burrito", price="8.25"),
    )
    await create_completed_period(session, day=TODAY, winner=restaurant)
    return lunch


def _line(item: MenuItem, quantity: int, notes: str | None = None) -> OrderItemIn:
    return OrderItemIn(menu_item_id=item.id, quantity=quantity, notes=notes)


@pytest.mark.asyncio
async def test_order_total_is_sum_of_subtotals(service: OrdersService, lunch: Lunch) -> None:
    order = await service.create_order(
        user_id=lunch.alice.id,
        restaurant_id=lunch.restaurant.id,
        items=[_line(lunch.taco, 2, "no onions"), _line(lunch.burrito, 1)],
    )

    assert order.status == OrderStatus.PENDING
    assert order.user_name == "Alice"
    lines = {item.menu_item_name: item for item in order.items}
    assert lines["Taco"].subtotal == Decimal("9.00")
    assert lines["Burrito"].subtotal == Decimal("8.25")
    assert order.total_amount == Decimal("17.25")
    assert order.total_amount == sum(item.subtotal for item in order.items)
    assert lines["Taco"].notes == "no onions"


@pytest.mark.asyncio
async def test_empty_order_rejected(service: OrdersService, lunch: Lunch) -> None:
    with pytest.raises(NoOrderItemsError):
        await service.create_order(
            user_id=lunch.alice.id, restaurant_id=lunch.restaurant.id, items=[]
        )


@pytest.mark.asyncio
async def test_order_requires_completed_voting(
    session: AsyncSession, service: OrdersService
) -> None:
    alice = await create_user(session)
    restaurant = await create_restaurant(session)
    taco = await create_menu_item(session, restaurant)

    with pytest.raises(VotingPeriodNotFoundError):
        await service.create_order(
            user_id=alice.id, restaurant_id=restaurant.id, items=[_line(taco, 1)]
        )

    await create_completed_period(session, day=TODAY, winner=None)
    with pytest.raises(VotingNotCompleteError):
        await service.create_order(
            user_id=alice.id, restaurant_id=restaurant.id, items=[_line(taco, 1)]
        )


@pytest.mark.asyncio
async def test_order_must_target_winner(
    session: AsyncSession, service: OrdersService, lunch: Lunch
) -> None:
    loser = await create_restaurant(session, name="Pho Corner")
    pho = await create_menu_item(session, loser, name="Pho")

    with pytest.raises(NotWinningRestaurantError):
        await service.create_order(user_id=lunch.alice.id, restaurant_id=loser.id, items=[_line(pho, 1)])
    with pytest.raises(InvalidRestaurantError):
        await service.create_order(
            user_id=lunch.alice.id, restaurant_id=lunch.restaurant.id, items=[_line(pho, 1)]
        )


@pytest.mark.asyncio
async def test_item_checks(session: AsyncSession, service: OrdersService, lunch: Lunch) -> None:
    sold_out = await create_menu_item(
        session, lunch.restaurant, name="Churros", is_available=False
    )
    restaurant_id = lunch.restaurant.id

    with pytest.raises(ItemNotAvailableError) as excinfo:
        await service.create_order(
            user_id=lunch.alice.id, restaurant_id=restaurant_id, items=[_line(sold_out, 1)]
        )
    assert "Churros" in excinfo.value.message

    with pytest.raises(InvalidQuantityError):
        await service.create_order(
            user_id=lunch.alice.id, restaurant_id=restaurant_id, items=[_line(lunch.taco, 0)]
        )
    with pytest.raises(MenuItemNotFoundError):
        await service.create_order(
            user_id=lunch.alice.id,
            restaurant_id=restaurant_id,
            items=[OrderItemIn(menu_item_id=uuid4(), quantity=1)],
        )


@pytest.mark.asyncio
async def test_one_live_order_per_day(service: OrdersService, lunch: Lunch) -> None:
    first = await service.create_order(
        user_id=lunch.alice.id, restaurant_id=lunch.restaurant.id, items=[_line(lunch.taco, 1)]
    )

    with pytest.raises(OrderAlreadyExistsError):
        await service.create_order(
            user_id=lunch.alice.id, restaurant_id=lunch.restaurant.id, items=[_line(lunch.taco, 1)]
        )

    await service.cancel_order(first.id, user_id=lunch.alice.id)
    again = await service.create_order(
        user_id=lunch.alice.id, restaurant_id=lunch.restaurant.id, items=[_line(lunch.burrito, 1)]
    )
    assert again.id != first.id
    assert {o.id for o in await service.list_user_orders(lunch.alice.id)} == {first.id, again.id}


@pytest.mark.asyncio
async def test_orders_are_private_to_their_owner(service: OrdersService, lunch: Lunch) -> None:
    order = await service.create_order(
        user_id=lunch.alice.id, restaurant_id=lunch.restaurant.id, items=[_line(lunch.taco, 1)]
    )

    with pytest.raises(OrderUnauthorizedError) as excinfo:
        await service.get_order(order.id, user_id=lunch.bob.id)
    assert status_for_code(excinfo.value.code) == 403

    with pytest.raises(OrderUnauthorizedError):
        await service.cancel_order(order.id, user_id=lunch.bob.id)
    with pytest.raises(OrderNotFoundError):
        await service.get_order(uuid4())

    assert (await service.get_order(order.id, user_id=lunch.alice.id)).id == order.id


@pytest.mark.asyncio
async def test_cancel_rules(service: OrdersService, lunch: Lunch) -> None:
    cancelled = await service.create_order(
        user_id=lunch.alice.id, restaurant_id=lunch.restaurant.id, items=[_line(lunch.taco, 1)]
    )
    confirmed = await service.create_order(
        user_id=lunch.bob.id, restaurant_id=lunch.restaurant.id, items=[_line(lunch.taco, 1)]
    )

    result = await service.cancel_order(cancelled.id, user_id=lunch.alice.id)
    assert result.status == OrderStatus.CANCELLED
    with pytest.raises(AlreadyCancelledError):
        await service.cancel_order(cancelled.id, user_id=lunch.alice.id)

    assert await service.confirm_orders(TODAY) == 1
    with pytest.raises(CannotCancelConfirmedError):
        await service.cancel_order(confirmed.id, user_id=lunch.bob.id)
    assert (await service.get_order(confirmed.id)).status == OrderStatus.CONFIRMED
    assert (await service.get_order(cancelled.id)).status == OrderStatus.CANCELLED


@pytest.mark.asyncio
async def test_group_order_aggregates_items(
    service: OrdersService, lunch: Lunch, session: AsyncSession, clock: FrozenClock
) -> None:
    carol = await create_user(session, name="Carol")
    await service.create_order(
        user_id=lunch.alice.id, restaurant_id=lunch.restaurant.id, items=[_line(lunch.taco, 2)]
    )
    clock.advance(minutes=1)
    await service.create_order(
        user_id=lunch.bob.id,
        restaurant_id=lunch.restaurant.id,
        items=[_line(lunch.taco, 3), _line(lunch.burrito, 1)],
    )
    clock.advance(minutes=1)
    dropped = await service.create_order(
        user_id=carol.id, restaurant_id=lunch.restaurant.id, items=[_line(lunch.burrito, 4)]
    )
    await service.cancel_order(dropped.id, user_id=carol.id)

    group_order = await service.get_group_order(TODAY)

    assert group_order.restaurant.id == lunch.restaurant.id
    assert group_order.total_orders == 2
    assert [o.user_name for o in group_order.orders] == ["Alice", "Bob"]
    assert group_order.total_amount == Decimal("30.75")
    taco, burrito = group_order.item_summary
    assert (taco.name, taco.total_quantity, taco.total_amount) == ("Taco", 5, Decimal("22.50"))
    assert taco.total_amount == 5 * taco.unit_price
    assert (burrito.name, burrito.total_quantity) == ("Burrito", 1)


@pytest.mark.asyncio
async def test_confirm_orders_requires_period(service: OrdersService) -> None:
    with pytest.raises(VotingPeriodNotFoundError):
        await service.confirm_orders(TODAY)
