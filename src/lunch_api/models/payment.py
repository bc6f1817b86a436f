"""Settlement rows created when a group closes."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lunch_api.db import Base, TimestampMixin, UTCDateTime, UUIDPrimaryKeyMixin, status_enum

from .user import User


class PaymentStatus(str, Enum):
    """Payment settlement states."""

    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"


class Payment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """What a member owes the group owner."""

    __tablename__ = "payments"

    group_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[PaymentStatus] = mapped_column(
        status_enum(PaymentStatus, "payment_status"),
        nullable=False,
        default=PaymentStatus.UNPAID,
    )
    confirmed_by_owner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    confirmed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    user: Mapped[User] = relationship(User, lazy="selectin")

    __table_args__ = (UniqueConstraint("group_id", "user_id"),)


__all__ = ["Payment", "PaymentStatus"]
