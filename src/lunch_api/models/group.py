"""Ad-hoc ordering groups and their membership."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lunch_api.common.time import utc_now
from lunch_api.db import Base, TimestampMixin, UTCDateTime, UUIDPrimaryKeyMixin, status_enum

from .restaurant import Restaurant
from .user import User


class GroupVisibility(str, Enum):
    """Who can discover and join a group."""

    PUBLIC = "public"
    PRIVATE = "private"


class Group(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A time-boxed group ordering together from one restaurant."""

    __tablename__ = "groups"

    owner_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    restaurant_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    visibility: Mapped[GroupVisibility] = mapped_column(
        status_enum(GroupVisibility, "group_visibility"),
        nullable=False,
        default=GroupVisibility.PUBLIC,
    )
    join_code: Mapped[str | None] = mapped_column(String(9), nullable=True, unique=True)
    end_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    is_closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    max_members: Mapped[int | None] = mapped_column(Integer, nullable=True)

    owner: Mapped[User] = relationship(User, lazy="selectin")
    restaurant: Mapped[Restaurant] = relationship(Restaurant, lazy="selectin")
    members: Mapped[list[GroupMember]] = relationship(
        "GroupMember",
        back_populates="group",
        lazy="selectin",
        order_by="GroupMember.joined_at",
    )

    def is_member(self, user_id: UUID) -> bool:
        return any(member.user_id == user_id for member in self.members)


class GroupMember(Base):
    """Membership of a user in a group."""

    __tablename__ = "group_members"

    group_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    joined_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now)

    group: Mapped[Group] = relationship("Group", back_populates="members")
    user: Mapped[User] = relationship(User, lazy="selectin")


__all__ = ["Group", "GroupMember", "GroupVisibility"]
