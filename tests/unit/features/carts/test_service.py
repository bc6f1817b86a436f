"""Tests for group carts."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.features.carts.exceptions import CartItemNotFoundError, NotCartOwnerError
from lunch_api.features.carts.service import CartsService
from lunch_api.features.groups.exceptions import GroupClosedError, NotGroupMemberError
from lunch_api.features.groups.schemas import GroupCreate
from lunch_api.features.groups.service import GroupsService
from lunch_api.features.orders.exceptions import InvalidQuantityError, InvalidRestaurantError
from lunch_api.features.restaurants.exceptions import MenuItemNotFoundError
from lunch_api.models import MenuItem, User
from lunch_api.settings import Settings

from tests.utils import FrozenClock, create_menu_item, create_restaurant, create_user


@dataclass
class Table:
    group_id: UUID
    groups: GroupsService
    carts: CartsService
    owner: User
    bob: User
    outsider: User
    taco: MenuItem
    burrito: MenuItem


@pytest_asyncio.fixture
async def table(session: AsyncSession, settings: Settings, clock: FrozenClock) -> Table:
    restaurant = await create_restaurant(session)
    owner = await create_user(session, name="Olivia")
    bob = await create_user(session, name="Bob")
    groups = GroupsService(session=session, settings=settings, now=clock)
    group = await groups.create_group(
        owner_id=owner.id,
        payload=GroupCreate(restaurant_id=restaurant.id, name="Tacos", duration_minutes=30),
    )
    await groups.join_group(group.id, user_id=bob.id)
    return Table(
        group_id=group.id,
        groups=groups,
        carts=CartsService(session=session, settings=settings, now=clock),
        owner=owner,
        bob=bob,
        outsider=await create_user(session, name="Mallory"),
        taco=await create_menu_item(session, restaurant, name="Taco", price="4.50"),
        burrito=await create_menu_item(session, restaurant, name="Burrito", price="8.25"),
    )


@pytest.mark.asyncio
async def test_add_to_cart_creates_line_per_add(table: Table, clock: FrozenClock) -> None:
    cart = await table.carts.add_to_cart(
        table.group_id, user_id=table.bob.id, menu_item_id=table.taco.id, quantity=2
    )
    assert cart.user_name == "Bob"
    assert cart.total == Decimal("9.00")

    clock.advance(seconds=1)

    cart = await table.carts.add_to_cart(
        table.group_id, user_id=table.bob.id, menu_item_id=table.taco.id, quantity=1
    )
    assert [item.quantity for item in cart.items] == [2, 1]
    assert cart.total == Decimal("13.50")


@pytest.mark.asyncio
@pytest.mark.parametrize("quantity", [0, -1, 100])
async def test_quantity_bounds(table: Table, quantity: int) -> None:
    with pytest.raises(InvalidQuantityError) as excinfo:
        await table.carts.add_to_cart(
            table.group_id, user_id=table.bob.id, menu_item_id=table.taco.id, quantity=quantity
        )

    assert excinfo.value.message == "Quantity must be between 1 and 99"


@pytest.mark.asyncio
async def test_only_members_can_add(table: Table) -> None:
    with pytest.raises(NotGroupMemberError):
        await table.carts.add_to_cart(
            table.group_id, user_id=table.outsider.id, menu_item_id=table.taco.id, quantity=1
        )


@pytest.mark.asyncio
async def test_menu_item_must_match_group_restaurant(
    table: Table, session: AsyncSession
) -> None:
    other = await create_restaurant(session, name="Pho Corner")
    pho = await create_menu_item(session, other, name="Pho")

    with pytest.raises(InvalidRestaurantError):
        await table.carts.add_to_cart(
            table.group_id, user_id=table.bob.id, menu_item_id=pho.id, quantity=1
        )
    with pytest.raises(MenuItemNotFoundError):
        await table.carts.add_to_cart(
            table.group_id, user_id=table.bob.id, menu_item_id=uuid4(), quantity=1
        )


@pytest.mark.asyncio
async def test_closed_group_rejects_cart_changes(table: Table) -> None:
    cart = await table.carts.add_to_cart(
        table.group_id, user_id=table.bob.id, menu_item_id=table.taco.id, quantity=1
    )
    await table.groups.close_group(table.group_id, user_id=table.owner.id)

    with pytest.raises(GroupClosedError):
        await table.carts.add_to_cart(
            table.group_id, user_id=table.bob.id, menu_item_id=table.taco.id, quantity=1
        )
    with pytest.raises(GroupClosedError):
        await table.carts.update_quantity(cart.items[0].id, user_id=table.bob.id, quantity=3)
    with pytest.raises(GroupClosedError):
        await table.carts.remove_from_cart(cart.items[0].id, user_id=table.bob.id)


@pytest.mark.asyncio
async def test_expired_group_rejects_cart_changes(table: Table, clock: FrozenClock) -> None:
    clock.advance(minutes=30)

    with pytest.raises(GroupClosedError):
        await table.carts.add_to_cart(
            table.group_id, user_id=table.bob.id, menu_item_id=table.taco.id, quantity=1
        )


@pytest.mark.asyncio
async def test_update_and_remove_own_items(table: Table) -> None:
    cart = await table.carts.add_to_cart(
        table.group_id, user_id=table.bob.id, menu_item_id=table.burrito.id, quantity=1
    )
    item_id = cart.items[0].id

    with pytest.raises(NotCartOwnerError):
        await table.carts.update_quantity(item_id, user_id=table.owner.id, quantity=2)
    with pytest.raises(InvalidQuantityError):
        await table.carts.update_quantity(item_id, user_id=table.bob.id, quantity=0)

    updated = await table.carts.update_quantity(item_id, user_id=table.bob.id, quantity=2)
    assert updated.total == Decimal("16.50")

    with pytest.raises(NotCartOwnerError):
        await table.carts.remove_from_cart(item_id, user_id=table.owner.id)
    await table.carts.remove_from_cart(item_id, user_id=table.bob.id)

    group_cart = await table.carts.get_group_cart(table.group_id, user_id=table.bob.id)
    assert group_cart.carts[0].items == []
    assert group_cart.group_total == Decimal("0.00")
    with pytest.raises(CartItemNotFoundError):
        await table.carts.remove_from_cart(item_id, user_id=table.bob.id)


@pytest.mark.asyncio
async def test_group_cart_totals(table: Table, clock: FrozenClock) -> None:
    await table.carts.add_to_cart(
        table.group_id, user_id=table.owner.id, menu_item_id=table.taco.id, quantity=2
    )
    clock.advance(minutes=1)
    await table.carts.add_to_cart(
        table.group_id, user_id=table.bob.id, menu_item_id=table.taco.id, quantity=3
    )
    await table.carts.add_to_cart(
        table.group_id, user_id=table.bob.id, menu_item_id=table.burrito.id, quantity=1
    )

    group_cart = await table.carts.get_group_cart(table.group_id, user_id=table.owner.id)

    assert [(t.user_name, t.total) for t in group_cart.user_totals] == [
        ("Olivia", Decimal("9.00")),
        ("Bob", Decimal("21.75")),
    ]
    assert group_cart.group_total == Decimal("30.75")
    with pytest.raises(NotGroupMemberError):
        await table.carts.get_group_cart(table.group_id, user_id=table.outsider.id)


@pytest.mark.asyncio
async def test_order_summary_aggregates_per_item(table: Table) -> None:
    await table.carts.add_to_cart(
        table.group_id, user_id=table.owner.id, menu_item_id=table.taco.id, quantity=2
    )
    await table.carts.add_to_cart(
        table.group_id, user_id=table.bob.id, menu_item_id=table.taco.id, quantity=3
    )
    await table.carts.add_to_cart(
        table.group_id, user_id=table.bob.id, menu_item_id=table.burrito.id, quantity=1
    )

    summary = await table.carts.get_order_summary(table.group_id, user_id=table.bob.id)

    assert summary.participants == 2
    assert summary.restaurant_name == "Taco Town"
    taco, burrito = summary.items
    assert (taco.name, taco.total_quantity, taco.total_amount) == ("Taco", 5, Decimal("22.50"))
    assert (burrito.name, burrito.total_quantity) == ("Burrito", 1)
    assert summary.total_quantity == 6
    assert summary.total_amount == Decimal("30.75")
