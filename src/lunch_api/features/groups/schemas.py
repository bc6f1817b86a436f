"""Pydantic schemas for groups."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from lunch_api.common.ids import UUIDStr
from lunch_api.common.schema import BaseSchema
from lunch_api.models import GroupVisibility


class GroupCreate(BaseSchema):
    """Payload for opening a new group. Duration bounds come from settings."""

    restaurant_id: UUIDStr
    name: str = Field(min_length=1, max_length=255)
    visibility: GroupVisibility = GroupVisibility.PUBLIC
    duration_minutes: int
    max_members: int | None = Field(default=None, ge=1)


class GroupMemberOut(BaseSchema):
    user_id: UUIDStr
    name: str
    joined_at: datetime


class GroupOut(BaseSchema):
    id: UUIDStr
    name: str
    visibility: GroupVisibility
    join_code: str | None = None
    owner_id: UUIDStr
    owner_name: str
    restaurant_id: UUIDStr
    restaurant_name: str
    end_at: datetime
    is_closed: bool
    max_members: int | None = None
    member_count: int
    members: list[GroupMemberOut] = Field(default_factory=list)
    created_at: datetime


__all__ = ["GroupCreate", "GroupMemberOut", "GroupOut"]
