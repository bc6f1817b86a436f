"""Pydantic schemas for group payments."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from lunch_api.common.ids import UUIDStr
from lunch_api.common.schema import BaseSchema
from lunch_api.models import PaymentStatus


class PaymentStatusUpdate(BaseSchema):
    status: PaymentStatus


class PaymentOut(BaseSchema):
    id: UUIDStr
    group_id: UUIDStr
    user_id: UUIDStr
    user_name: str
    status: PaymentStatus
    confirmed_by_owner: bool
    confirmed_at: datetime | None = None
    updated_at: datetime


class PaymentStatistics(BaseSchema):
    total: int = 0
    paid: int = 0
    unpaid: int = 0
    pending: int = 0
    all_confirmed: bool = False


class GroupPayments(BaseSchema):
    group_id: UUIDStr
    payments: list[PaymentOut] = Field(default_factory=list)
    statistics: PaymentStatistics


__all__ = ["GroupPayments", "PaymentOut", "PaymentStatistics", "PaymentStatusUpdate"]
