"""Pydantic schemas for admin reporting."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from lunch_api.common.ids import UUIDStr
from lunch_api.common.schema import BaseSchema


class WinningRestaurant(BaseSchema):
    id: UUIDStr
    name: str
    vote_count: int


class DailyStats(BaseSchema):
    date: dt.date
    total_employees: int
    total_votes: int = 0
    participation_rate: float = 0.0
    total_orders: int = 0
    order_participation_rate: float = 0.0
    total_revenue: Decimal = Decimal("0.00")
    winning_restaurant: WinningRestaurant | None = None


class SystemOverview(BaseSchema):
    total_users: int
    total_active_restaurants: int
    total_orders: int
    total_revenue: Decimal


__all__ = ["DailyStats", "SystemOverview", "WinningRestaurant"]
