"""Pydantic schemas for orders, group orders and exports."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Literal

from pydantic import Field

from lunch_api.common.ids import UUIDStr
from lunch_api.common.schema import BaseSchema
from lunch_api.features.restaurants.schemas import RestaurantOut
from lunch_api.models import OrderStatus

ExportFormat = Literal["text", "csv", "json"]
EXPORT_FORMATS: tuple[str, ...] = ("text", "csv", "json")


class OrderItemIn(BaseSchema):
    menu_item_id: UUIDStr
    quantity: int
    notes: str | None = Field(default=None, max_length=500)


class OrderCreate(BaseSchema):
    restaurant_id: UUIDStr
    items: list[OrderItemIn] = Field(default_factory=list)


class OrderItemOut(BaseSchema):
    id: UUIDStr
    menu_item_id: UUIDStr
    menu_item_name: str
    unit_price: Decimal
    quantity: int
    notes: str | None = None
    subtotal: Decimal


class OrderOut(BaseSchema):
    id: UUIDStr
    user_id: UUIDStr
    user_name: str
    restaurant_id: UUIDStr
    voting_period_id: UUIDStr
    status: OrderStatus
    total_amount: Decimal
    items: list[OrderItemOut] = Field(default_factory=list)
    created_at: dt.datetime


class ItemSummary(BaseSchema):
    """Aggregated quantity and amount for one menu item."""

    menu_item_id: UUIDStr
    name: str
    unit_price: Decimal
    total_quantity: int
    total_amount: Decimal


class GroupOrder(BaseSchema):
    """Every live order of a completed voting period, plus the restaurant-facing summary."""

    date: dt.date
    voting_period_id: UUIDStr
    restaurant: RestaurantOut
    orders: list[OrderOut] = Field(default_factory=list)
    total_orders: int
    total_amount: Decimal
    item_summary: list[ItemSummary] = Field(default_factory=list)


# ---- Export document ----


class ExportItem(BaseSchema):
    item_name: str
    quantity: int
    notes: str | None = None
    price: Decimal
    subtotal: Decimal


class ExportOrder(BaseSchema):
    employee_name: str
    items: list[ExportItem]
    total: Decimal


class ExportBreakdown(BaseSchema):
    item_name: str
    total_quantity: int
    total_amount: Decimal


class ExportSummary(BaseSchema):
    total_orders: int
    total_amount: Decimal
    item_breakdown: list[ExportBreakdown]


class ExportRestaurant(BaseSchema):
    name: str
    cuisine: str | None = None


class OrderExport(BaseSchema):
    date: dt.date
    restaurant: ExportRestaurant
    orders: list[ExportOrder]
    summary: ExportSummary


__all__ = [
    "EXPORT_FORMATS",
    "ExportBreakdown",
    "ExportFormat",
    "ExportItem",
    "ExportOrder",
    "ExportRestaurant",
    "ExportSummary",
    "GroupOrder",
    "ItemSummary",
    "OrderCreate",
    "OrderExport",
    "OrderItemIn",
    "OrderItemOut",
    "OrderOut",
]
