"""User persistence helpers."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.models import User, UserRole


class UsersRepository:
    """Query helpers for user accounts."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        canonical = User.canonicalize_email(email)
        stmt = select(User).where(User.email_canonical == canonical).limit(1)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_users(self) -> list[User]:
        stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, *, role: UserRole | None = None) -> int:
        stmt = select(func.count()).select_from(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def add(self, user: User) -> User:
        self._session.add(user)
        await self._session.flush()
        return user


__all__ = ["UsersRepository"]
