"""Per-member carts inside a group."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lunch_api.common.time import utc_now
from lunch_api.db import Base, UTCDateTime, UUIDPrimaryKeyMixin

from .restaurant import MenuItem
from .user import User


class Cart(UUIDPrimaryKeyMixin, Base):
    """A member's cart; one per (group, user)."""

    __tablename__ = "carts"

    group_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now)

    user: Mapped[User] = relationship(User, lazy="selectin")
    items: Mapped[list[CartItem]] = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="CartItem.added_at",
    )

    __table_args__ = (UniqueConstraint("group_id", "user_id"),)


class CartItem(UUIDPrimaryKeyMixin, Base):
    """A line in a cart."""

    __tablename__ = "cart_items"

    cart_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("carts.id", ondelete="CASCADE"), nullable=False
    )
    menu_item_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    added_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now)

    cart: Mapped[Cart] = relationship("Cart", back_populates="items")
    menu_item: Mapped[MenuItem] = relationship(MenuItem, lazy="selectin")


__all__ = ["Cart", "CartItem"]
