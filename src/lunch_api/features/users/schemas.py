"""Pydantic schemas for user accounts."""

from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from lunch_api.common.ids import UUIDStr
from lunch_api.common.schema import BaseSchema
from lunch_api.models import UserRole


class UserCreate(BaseSchema):
    """Payload used to register a user."""

    email: EmailStr
    name: str = Field(min_length=1, max_length=255)
    role: UserRole = UserRole.EMPLOYEE

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return value.strip() if isinstance(value, str) else value


class UserOut(BaseSchema):
    """Public representation of a user."""

    id: UUIDStr
    email: str
    name: str
    role: UserRole
    is_verified: bool
    created_at: datetime


__all__ = ["UserCreate", "UserOut"]
