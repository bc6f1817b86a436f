"""Tests for group creation, discovery, membership, closing and deletion."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.features.groups.exceptions import (
    AlreadyMemberError,
    GroupAccessDeniedError,
    GroupClosedError,
    GroupExpiredError,
    GroupFullError,
    GroupNotFoundError,
    GroupStillOpenError,
    InvalidDurationError,
    InvalidJoinCodeError,
    InvalidJoinCodeFormatError,
    JoinCodeExhaustedError,
    JoinCodeRequiredError,
    NotGroupOwnerError,
    PaymentsOutstandingError,
)
from lunch_api.features.groups.schemas import GroupCreate
from lunch_api.features.groups.service import GroupsService
from lunch_api.features.payments.repository import PaymentsRepository
from lunch_api.features.payments.service import PaymentsService
from lunch_api.features.restaurants.exceptions import RestaurantNotFoundError
from lunch_api.models import GroupVisibility, PaymentStatus, Restaurant, User
from lunch_api.settings import Settings

from tests.utils import FrozenClock, create_restaurant, create_user

CODE = "ABCD-EFGH"


@dataclass
class People:
    owner: User
    bob: User
    carol: User
    restaurant: Restaurant


@pytest_asyncio.fixture
async def people(session: AsyncSession) -> People:
    return People(
        owner=await create_user(session, name="Olivia"),
        bob=await create_user(session, name="Bob"),
        carol=await create_user(session, name="Carol"),
        restaurant=await create_restaurant(session, name="Taco Town"),
    )


@pytest.fixture
def make_service(
    session: AsyncSession, settings: Settings, clock: FrozenClock
) -> Callable[..., GroupsService]:
    def factory(**kwargs) -> GroupsService:
        kwargs.setdefault("join_code_factory", lambda: CODE)
        return GroupsService(session=session, settings=settings, now=clock, **kwargs)

    return factory


def _payload(restaurant: Restaurant, **overrides) -> GroupCreate:
    values = {"restaurant_id": restaurant.id, "name": "Friday tacos", "duration_minutes": 60}
    values.update(overrides)
    return GroupCreate(**values)


@pytest.mark.asyncio
async def test_create_public_group(make_service, people: People, clock: FrozenClock) -> None:
    group = await make_service().create_group(owner_id=people.owner.id, payload=_payload(people.restaurant))

    assert group.visibility == GroupVisibility.PUBLIC
    assert group.join_code is None
    assert group.owner_name == "Olivia"
    assert group.restaurant_name == "Taco Town"
    assert group.end_at == clock.now + timedelta(minutes=60)
    assert group.is_closed is False
    assert group.member_count == 1
    assert [m.user_id for m in group.members] == [people.owner.id]


@pytest.mark.asyncio
async def test_create_private_group_gets_join_code(make_service, people: People) -> None:
    group = await make_service().create_group(
        owner_id=people.owner.id,
        payload=_payload(people.restaurant, visibility=GroupVisibility.PRIVATE),
    )

    assert group.visibility == GroupVisibility.PRIVATE
    assert group.join_code == CODE


@pytest.mark.asyncio
async def test_join_code_collisions_are_retried(make_service, people: People) -> None:
    codes = iter(["AAAA-AAAA", "AAAA-AAAA", "BBBB-BBBB"])
    service = make_service(join_code_factory=lambda: next(codes))
    private = _payload(people.restaurant, visibility=GroupVisibility.PRIVATE)

    first = await service.create_group(owner_id=people.owner.id, payload=private)
    second = await service.create_group(owner_id=people.bob.id, payload=private)

    assert (first.join_code, second.join_code) == ("AAAA-AAAA", "BBBB-BBBB")


@pytest.mark.asyncio
async def test_join_code_generation_gives_up(make_service, people: People) -> None:
    service = make_service()
    private = _payload(people.restaurant, visibility=GroupVisibility.PRIVATE)
    await service.create_group(owner_id=people.owner.id, payload=private)

    with pytest.raises(JoinCodeExhaustedError):
        await service.create_group(owner_id=people.bob.id, payload=private)


@pytest.mark.asyncio
@pytest.mark.parametrize("minutes", [14, 24 * 60 + 1])
async def test_duration_bounds(make_service, people: People, minutes: int) -> None:
    with pytest.raises(InvalidDurationError) as excinfo:
        await make_service().create_group(
            owner_id=people.owner.id, payload=_payload(people.restaurant, duration_minutes=minutes)
        )

    assert excinfo.value.details == {"min_minutes": 15, "max_minutes": 1440}


@pytest.mark.asyncio
async def test_duration_limits_are_inclusive(make_service, people: People) -> None:
    service = make_service()

    short = await service.create_group(
        owner_id=people.owner.id, payload=_payload(people.restaurant, duration_minutes=15)
    )
    long = await service.create_group(
        owner_id=people.bob.id, payload=_payload(people.restaurant, duration_minutes=24 * 60)
    )

    assert short.end_at < long.end_at


@pytest.mark.asyncio
async def test_unknown_restaurant(make_service, people: People) -> None:
    with pytest.raises(RestaurantNotFoundError):
        await make_service().create_group(
            owner_id=people.owner.id, payload=GroupCreate(restaurant_id=uuid4(), name="x", duration_minutes=60)
        )


@pytest.mark.asyncio
async def test_join_public_group(make_service, people: People) -> None:
    service = make_service()
    group = await service.create_group(owner_id=people.owner.id, payload=_payload(people.restaurant))

    joined = await service.join_group(group.id, user_id=people.bob.id)

    assert joined.member_count == 2
    assert {m.name for m in joined.members} == {"Olivia", "Bob"}
    with pytest.raises(AlreadyMemberError):
        await service.join_group(group.id, user_id=people.bob.id)


@pytest.mark.asyncio
async def test_private_group_join_code_checks(make_service, people: People) -> None:
    service = make_service()
    group = await service.create_group(
        owner_id=people.owner.id,
        payload=_payload(people.restaurant, visibility=GroupVisibility.PRIVATE),
    )

    with pytest.raises(JoinCodeRequiredError):
        await service.join_group(group.id, user_id=people.bob.id)
    with pytest.raises(JoinCodeRequiredError):
        await service.join_group(group.id, user_id=people.bob.id, join_code="   ")
    with pytest.raises(InvalidJoinCodeFormatError):
        await service.join_group(group.id, user_id=people.bob.id, join_code="ABCD")
    with pytest.raises(InvalidJoinCodeError):
        await service.join_group(group.id, user_id=people.bob.id, join_code="ZZZZ-ZZZZ")

    joined = await service.join_group(group.id, user_id=people.bob.id, join_code=" abcd-efgh ")
    assert joined.member_count == 2


@pytest.mark.asyncio
async def test_group_capacity(make_service, people: People) -> None:
    service = make_service()
    group = await service.create_group(
        owner_id=people.owner.id, payload=_payload(people.restaurant, max_members=2)
    )
    await service.join_group(group.id, user_id=people.bob.id)

    with pytest.raises(GroupFullError):
        await service.join_group(group.id, user_id=people.carol.id)


@pytest.mark.asyncio
async def test_join_closed_or_expired_group(
    make_service, people: People, clock: FrozenClock
) -> None:
    service = make_service()
    closed = await service.create_group(owner_id=people.owner.id, payload=_payload(people.restaurant))
    await service.close_group(closed.id, user_id=people.owner.id)
    with pytest.raises(GroupClosedError):
        await service.join_group(closed.id, user_id=people.bob.id)

    expiring = await service.create_group(
        owner_id=people.owner.id, payload=_payload(people.restaurant, duration_minutes=15)
    )
    clock.advance(minutes=15)
    with pytest.raises(GroupExpiredError):
        await service.join_group(expiring.id, user_id=people.bob.id)
    assert (await service.get_group(expiring.id)).is_closed is True


@pytest.mark.asyncio
async def test_list_groups(make_service, people: People, clock: FrozenClock) -> None:
    service = make_service()
    public = await service.create_group(
        owner_id=people.owner.id, payload=_payload(people.restaurant, name="Taco Tuesday")
    )
    clock.advance(minutes=1)
    private = await service.create_group(
        owner_id=people.owner.id,
        payload=_payload(people.restaurant, name="Secret lunch", visibility=GroupVisibility.PRIVATE),
    )
    clock.advance(minutes=1)
    short = await service.create_group(
        owner_id=people.bob.id, payload=_payload(people.restaurant, name="Quick bite", duration_minutes=15)
    )

    discovered = await service.list_groups(user_id=people.carol.id)
    assert [g.id for g in discovered] == [short.id, public.id]

    mine = await service.list_groups(user_id=people.owner.id, mine=True)
    assert [g.id for g in mine] == [private.id, public.id]
    mine_private = await service.list_groups(
        user_id=people.owner.id, mine=True, visibility=GroupVisibility.PRIVATE
    )
    assert [g.id for g in mine_private] == [private.id]

    by_owner = await service.list_groups(user_id=people.carol.id, search="BOB")
    assert [g.id for g in by_owner] == [short.id]
    by_name = await service.list_groups(user_id=people.carol.id, search="tuesday")
    assert [g.id for g in by_name] == [public.id]

    clock.advance(minutes=15)
    assert [g.id for g in await service.list_groups(user_id=people.carol.id)] == [public.id]
    assert (await service.get_group(short.id)).is_closed is True


@pytest.mark.asyncio
async def test_private_group_visibility(make_service, people: People) -> None:
    service = make_service()
    group = await service.create_group(
        owner_id=people.owner.id,
        payload=_payload(people.restaurant, visibility=GroupVisibility.PRIVATE),
    )

    with pytest.raises(GroupAccessDeniedError):
        await service.get_group(group.id, user_id=people.bob.id)
    assert (await service.get_group(group.id, user_id=people.owner.id)).id == group.id

    found = await service.find_by_join_code("abcd-efgh")
    assert found.id == group.id
    with pytest.raises(InvalidJoinCodeFormatError):
        await service.find_by_join_code("nope")
    with pytest.raises(GroupNotFoundError):
        await service.find_by_join_code("ZZZZ-ZZZZ")


@pytest.mark.asyncio
async def test_close_group_initializes_payments_once(
    make_service, people: People, session: AsyncSession
) -> None:
    service = make_service()
    group = await service.create_group(owner_id=people.owner.id, payload=_payload(people.restaurant))
    await service.join_group(group.id, user_id=people.bob.id)

    with pytest.raises(NotGroupOwnerError):
        await service.close_group(group.id, user_id=people.bob.id)

    closed = await service.close_group(group.id, user_id=people.owner.id)
    await service.close_group(group.id, user_id=people.owner.id)

    assert closed.is_closed is True
    payments = await PaymentsRepository(session).list_for_group(group.id)
    assert sorted(p.user_id for p in payments) == sorted([people.owner.id, people.bob.id])
    assert {p.status for p in payments} == {PaymentStatus.UNPAID}


@pytest.mark.asyncio
async def test_close_expired_groups(make_service, people: People, clock: FrozenClock) -> None:
    service = make_service()
    short = await service.create_group(
        owner_id=people.owner.id, payload=_payload(people.restaurant, duration_minutes=15)
    )
    await service.create_group(
        owner_id=people.bob.id, payload=_payload(people.restaurant, duration_minutes=120)
    )

    assert await service.close_expired_groups() == 0
    clock.advance(minutes=30)
    assert await service.close_expired_groups() == 1
    assert await service.close_expired_groups() == 0
    assert (await service.get_group(short.id)).is_closed is True


@pytest.mark.asyncio
async def test_delete_group_requires_settled_payments(
    make_service, people: People, session: AsyncSession, clock: FrozenClock
) -> None:
    service = make_service()
    payments = PaymentsService(session=session, now=clock)
    group = await service.create_group(owner_id=people.owner.id, payload=_payload(people.restaurant))
    await service.join_group(group.id, user_id=people.bob.id)

    with pytest.raises(GroupStillOpenError):
        await service.delete_group(group.id, user_id=people.owner.id)

    await service.close_group(group.id, user_id=people.owner.id)
    with pytest.raises(NotGroupOwnerError):
        await service.delete_group(group.id, user_id=people.bob.id)

    await payments.mark_as_pending(group.id, user_id=people.bob.id)
    await payments.update_payment_status(
        group.id, target_user_id=people.owner.id, owner_id=people.owner.id, status=PaymentStatus.PAID
    )
    with pytest.raises(PaymentsOutstandingError):
        await service.delete_group(group.id, user_id=people.owner.id)

    await payments.update_payment_status(
        group.id, target_user_id=people.bob.id, owner_id=people.owner.id, status=PaymentStatus.PAID
    )
    await service.delete_group(group.id, user_id=people.owner.id)

    with pytest.raises(GroupNotFoundError):
        await service.get_group(group.id)
