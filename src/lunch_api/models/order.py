"""Individual orders placed against the day's winning restaurant."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, Numeric, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lunch_api.common.time import utc_now
from lunch_api.db import Base, TimestampMixin, UTCDateTime, UUIDPrimaryKeyMixin, status_enum

from .restaurant import MenuItem
from .user import User


class OrderStatus(str, Enum):
    """Order lifecycle states."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Order(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A user's order for one voting period."""

    __tablename__ = "orders"

    user_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    restaurant_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False
    )
    voting_period_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("voting_periods.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[OrderStatus] = mapped_column(
        status_enum(OrderStatus, "order_status"),
        nullable=False,
        default=OrderStatus.PENDING,
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    user: Mapped[User] = relationship(User, lazy="selectin")
    items: Mapped[list[OrderItem]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.created_at",
    )


class OrderItem(UUIDPrimaryKeyMixin, Base):
    """One line of an order."""

    __tablename__ = "order_items"

    order_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    menu_item_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("menu_items.id", ondelete="RESTRICT"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now)

    order: Mapped[Order] = relationship("Order", back_populates="items")
    menu_item: Mapped[MenuItem] = relationship(MenuItem, lazy="selectin")


__all__ = ["Order", "OrderItem", "OrderStatus"]
