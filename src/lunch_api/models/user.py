"""User accounts."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from lunch_api.db import Base, TimestampMixin, UUIDPrimaryKeyMixin, status_enum


class UserRole(str, Enum):
    """Roles recognised by the platform."""

    EMPLOYEE = "employee"
    ADMIN = "admin"


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Employee (or administrator) account."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(320), nullable=False)
    email_canonical: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        status_enum(UserRole, "user_role"),
        nullable=False,
        default=UserRole.EMPLOYEE,
    )
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @staticmethod
    def canonicalize_email(email: str) -> str:
        return email.strip().lower()


__all__ = ["User", "UserRole"]
