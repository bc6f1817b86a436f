"""Business logic for group creation, discovery, membership and closing."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.common.logging import log_context
from lunch_api.common.time import utc_now
from lunch_api.features.payments.repository import PaymentsRepository
from lunch_api.features.restaurants.exceptions import RestaurantNotFoundError
from lunch_api.features.restaurants.repository import RestaurantsRepository
from lunch_api.models import Group, GroupVisibility
from lunch_api.settings import Settings

from .exceptions import (
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
from .join_codes import generate_join_code, is_valid_join_code_format, normalize_join_code
from .lifecycle import close_group, is_expired, load_group
from .repository import GroupsRepository
from .schemas import GroupCreate, GroupMemberOut, GroupOut

logger = logging.getLogger(__name__)


def group_out(group: Group) -> GroupOut:
    """Serialize a group whose owner, restaurant and members are loaded."""

    return GroupOut(
        id=group.id,
        name=group.name,
        visibility=group.visibility,
        join_code=group.join_code,
        owner_id=group.owner_id,
        owner_name=group.owner.name,
        restaurant_id=group.restaurant_id,
        restaurant_name=group.restaurant.name,
        end_at=group.end_at,
        is_closed=group.is_closed,
        max_members=group.max_members,
        member_count=len(group.members),
        members=[
            GroupMemberOut(user_id=m.user_id, name=m.user.name, joined_at=m.joined_at)
            for m in group.members
        ],
        created_at=group.created_at,
    )


class GroupsService:
    """Open, discover, join, close and delete ordering groups."""

    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        now: Callable[[], datetime] = utc_now,
        join_code_factory: Callable[[], str] = generate_join_code,
    ) -> None:
        self._session = session
        self._settings = settings
        self._now = now
        self._join_code_factory = join_code_factory
        self._repo = GroupsRepository(session)
        self._payments = PaymentsRepository(session)
        self._restaurants = RestaurantsRepository(session)

    async def create_group(self, *, owner_id: UUID, payload: GroupCreate) -> GroupOut:
        if await self._restaurants.get(payload.restaurant_id) is None:
            raise RestaurantNotFoundError()

        duration = timedelta(minutes=payload.duration_minutes)
        min_duration = self._settings.group_min_duration
        max_duration = self._settings.group_max_duration
        if duration < min_duration or duration > max_duration:
            raise InvalidDurationError(
                details={
                    "min_minutes": int(min_duration.total_seconds() // 60),
                    "max_minutes": int(max_duration.total_seconds() // 60),
                }
            )

        visibility = GroupVisibility(payload.visibility)
        join_code = None
        if visibility == GroupVisibility.PRIVATE:
            join_code = await self._unused_join_code()

        now = self._now()
        group = Group(
            owner_id=owner_id,
            restaurant_id=payload.restaurant_id,
            name=payload.name.strip(),
            visibility=visibility,
            join_code=join_code,
            end_at=now + duration,
            is_closed=False,
            max_members=payload.max_members,
            created_at=now,
            updated_at=now,
        )
        await self._repo.add(group)
        await self._repo.add_member(group_id=group.id, user_id=owner_id, joined_at=now)

        logger.info(
            "group.create.success",
            extra=log_context(
                group_id=group.id,
                user_id=owner_id,
                restaurant_id=payload.restaurant_id,
                visibility=visibility.value,
                duration_minutes=payload.duration_minutes,
            ),
        )
        return group_out(await self._load(group.id))

    async def _unused_join_code(self) -> str:
        attempts = self._settings.join_code_max_attempts
        for _ in range(attempts):
            code = self._join_code_factory()
            if not await self._repo.join_code_exists(code):
                return code
        logger.error("group.join_code.exhausted", extra=log_context(attempts=attempts))
        raise JoinCodeExhaustedError()

    async def list_groups(
        self,
        *,
        user_id: UUID,
        visibility: GroupVisibility | None = None,
        mine: bool = False,
        search: str | None = None,
    ) -> list[GroupOut]:
        """List open groups.

        With ``mine`` the groups ``user_id`` belongs to are returned (optionally
        narrowed by ``visibility``); otherwise only public groups are listed.
        """
        term = (search or "").strip() or None
        if mine:
            groups = await self._repo.list_open(visibility=visibility, member_id=user_id, search=term)
        else:
            groups = await self._repo.list_open(visibility=GroupVisibility.PUBLIC, search=term)

        now = self._now()
        visible: list[Group] = []
        for group in groups:
            if is_expired(group, now):
                await close_group(self._session, group, now=now, reason="expired")
                continue
            visible.append(group)
        return [group_out(group) for group in visible]

    async def get_group(self, group_id: UUID, *, user_id: UUID | None = None) -> GroupOut:
        group = await self._load(group_id)
        if (
            user_id is not None
            and group.visibility == GroupVisibility.PRIVATE
            and group.owner_id != user_id
            and not group.is_member(user_id)
        ):
            raise GroupAccessDeniedError()
        return group_out(group)

    async def find_by_join_code(self, join_code: str) -> GroupOut:
        code = normalize_join_code(join_code)
        if not is_valid_join_code_format(code):
            raise InvalidJoinCodeFormatError()
        group = await self._repo.get_by_join_code(code)
        if group is None:
            raise GroupNotFoundError()
        group = await self._load(group.id)
        return group_out(group)

    async def join_group(
        self,
        group_id: UUID,
        *,
        user_id: UUID,
        join_code: str | None = None,
    ) -> GroupOut:
        now = self._now()
        group = await load_group(self._session, group_id, now=now, lazy_close=False)

        if group.is_closed:
            raise GroupClosedError()
        if is_expired(group, now):
            await close_group(self._session, group, now=now, reason="expired")
            raise GroupExpiredError()
        if group.is_member(user_id):
            raise AlreadyMemberError()

        if group.visibility == GroupVisibility.PRIVATE:
            if not join_code or not join_code.strip():
                raise JoinCodeRequiredError()
            code = normalize_join_code(join_code)
            if not is_valid_join_code_format(code):
                raise InvalidJoinCodeFormatError()
            if code != group.join_code:
                logger.info(
                    "group.join.bad_code",
                    extra=log_context(group_id=group.id, user_id=user_id),
                )
                raise InvalidJoinCodeError()

        if group.max_members is not None:
            if await self._repo.member_count(group.id) >= group.max_members:
                raise GroupFullError(details={"max_members": group.max_members})

        try:
            async with self._session.begin_nested():
                await self._repo.add_member(group_id=group.id, user_id=user_id, joined_at=now)
        except IntegrityError as exc:
            raise AlreadyMemberError() from exc

        logger.info("group.join.success", extra=log_context(group_id=group.id, user_id=user_id))
        return group_out(await self._load(group.id))

    async def close_group(self, group_id: UUID, *, user_id: UUID) -> GroupOut:
        """Owner closes the group early; payments are initialized."""

        group = await self._load(group_id)
        if group.owner_id != user_id:
            raise NotGroupOwnerError()
        await close_group(self._session, group, now=self._now(), reason="owner")
        return group_out(await self._load(group.id))

    async def close_expired_groups(self, now: datetime | None = None) -> int:
        """Close every open group whose ``end_at`` has passed; returns the count."""

        moment = now or self._now()
        expired = await self._repo.list_expired_open(moment)
        for group in expired:
            await close_group(self._session, group, now=moment, reason="expired")
        logger.info("group.sweep.complete", extra=log_context(closed=len(expired)))
        return len(expired)

    async def delete_group(self, group_id: UUID, *, user_id: UUID) -> None:
        group = await self._load(group_id)
        if group.owner_id != user_id:
            raise NotGroupOwnerError()
        if not group.is_closed:
            raise GroupStillOpenError()

        if not await self._payments.all_settled(group.id):
            raise PaymentsOutstandingError()

        await self._repo.delete_with_children(group.id)
        logger.info("group.delete.success", extra=log_context(group_id=group_id, user_id=user_id))

    async def _load(self, group_id: UUID) -> Group:
        return await load_group(self._session, group_id, now=self._now())


__all__ = ["GroupsService", "group_out"]
