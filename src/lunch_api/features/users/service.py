"""Business logic for user accounts."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lunch_api.common.logging import log_context
from lunch_api.models import User, UserRole

from .exceptions import EmailAlreadyExistsError, UserNotFoundError
from .repository import UsersRepository
from .schemas import UserCreate, UserOut

logger = logging.getLogger(__name__)


class UsersService:
    """Register users and manage their role/verification flags."""

    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._repo = UsersRepository(session)

    async def create_user(self, payload: UserCreate) -> UserOut:
        email = str(payload.email).strip()
        canonical = User.canonicalize_email(email)

        if await self._repo.get_by_email(canonical) is not None:
            logger.info("users.create.conflict", extra=log_context(email=canonical))
            raise EmailAlreadyExistsError()

        user = User(
            email=email,
            email_canonical=canonical,
            name=payload.name,
            role=UserRole(payload.role),
            is_verified=False,
        )
        try:
            await self._repo.add(user)
        except IntegrityError as exc:
            raise EmailAlreadyExistsError() from exc

        logger.info(
            "users.create.success",
            extra=log_context(user_id=user.id, role=user.role.value),
        )
        return UserOut.model_validate(user)

    async def get_user(self, user_id: UUID) -> UserOut:
        user = await self._require(user_id)
        return UserOut.model_validate(user)

    async def list_users(self) -> list[UserOut]:
        users = await self._repo.list_users()
        return [UserOut.model_validate(user) for user in users]

    async def update_role(self, user_id: UUID, role: UserRole) -> UserOut:
        user = await self._require(user_id)
        user.role = UserRole(role)
        await self._session.flush()
        logger.info(
            "users.role.updated",
            extra=log_context(user_id=user.id, role=user.role.value),
        )
        return UserOut.model_validate(user)

    async def mark_verified(self, user_id: UUID) -> UserOut:
        user = await self._require(user_id)
        if not user.is_verified:
            user.is_verified = True
            await self._session.flush()
            logger.info("users.verified", extra=log_context(user_id=user.id))
        return UserOut.model_validate(user)

    async def _require(self, user_id: UUID) -> User:
        user = await self._repo.get_by_id(user_id)
        if user is None:
            logger.debug("users.get.not_found", extra=log_context(user_id=user_id))
            raise UserNotFoundError()
        return user


__all__ = ["UsersService"]
