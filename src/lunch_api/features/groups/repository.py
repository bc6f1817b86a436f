"""Group persistence helpers."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from lunch_api.models import (
    Cart,
    CartItem,
    Group,
    GroupMember,
    GroupVisibility,
    Payment,
    Restaurant,
    User,
)


class GroupsRepository:
    """Query helpers for groups and their membership."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, group_id: UUID) -> Group | None:
        stmt = (
            select(Group)
            .where(Group.id == group_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_join_code(self, join_code: str) -> Group | None:
        stmt = (
            select(Group)
            .where(Group.join_code == join_code)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def join_code_exists(self, join_code: str) -> bool:
        stmt = select(exists().where(Group.join_code == join_code))
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def list_open(
        self,
        *,
        visibility: GroupVisibility | None = None,
        member_id: UUID | None = None,
        search: str | None = None,
    ) -> list[Group]:
        """Open groups, newest first, optionally narrowed by visibility, member and search."""

        owner = aliased(User)
        stmt = (
            select(Group)
            .join(Restaurant, Restaurant.id == Group.restaurant_id)
            .join(owner, owner.id == Group.owner_id)
            .where(Group.is_closed.is_(False))
        )
        if visibility is not None:
            stmt = stmt.where(Group.visibility == visibility)
        if member_id is not None:
            stmt = stmt.where(
                exists().where(
                    GroupMember.group_id == Group.id,
                    GroupMember.user_id == member_id,
                )
            )
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Group.name).like(pattern),
                    func.lower(Restaurant.name).like(pattern),
                    func.lower(owner.name).like(pattern),
                )
            )
        stmt = stmt.order_by(Group.created_at.desc(), Group.id.desc()).execution_options(
            populate_existing=True
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().unique().all())

    async def list_expired_open(self, now: datetime) -> list[Group]:
        stmt = (
            select(Group)
            .where(Group.is_closed.is_(False), Group.end_at <= now)
            .order_by(Group.end_at, Group.id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def is_member(self, *, group_id: UUID, user_id: UUID) -> bool:
        stmt = select(
            exists().where(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
        )
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def member_count(self, group_id: UUID) -> int:
        stmt = select(func.count()).select_from(GroupMember).where(GroupMember.group_id == group_id)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def add(self, group: Group) -> Group:
        self._session.add(group)
        await self._session.flush()
        return group

    async def add_member(self, *, group_id: UUID, user_id: UUID, joined_at: datetime) -> None:
        self._session.add(GroupMember(group_id=group_id, user_id=user_id, joined_at=joined_at))
        await self._session.flush()

    async def delete_with_children(self, group_id: UUID) -> None:
        """Delete a group and every row hanging off it (cart items first)."""

        await self._session.flush()
        cart_ids = select(Cart.id).where(Cart.group_id == group_id).scalar_subquery()
        await self._session.execute(delete(CartItem).where(CartItem.cart_id.in_(cart_ids)))
        for model in (Cart, Payment, GroupMember):
            await self._session.execute(delete(model).where(model.group_id == group_id))
        await self._session.execute(delete(Group).where(Group.id == group_id))
        await self._session.flush()


__all__ = ["GroupsRepository"]
