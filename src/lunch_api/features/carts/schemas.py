"""Pydantic schemas for carts and the restaurant-facing summary."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from lunch_api.common.ids import UUIDStr
from lunch_api.common.schema import BaseSchema
from lunch_api.features.orders.schemas import ItemSummary


class CartItemAdd(BaseSchema):
    menu_item_id: UUIDStr
    quantity: int = 1


class CartItemOut(BaseSchema):
    id: UUIDStr
    menu_item_id: UUIDStr
    name: str
    unit_price: Decimal
    quantity: int
    subtotal: Decimal
    added_at: datetime


class CartOut(BaseSchema):
    id: UUIDStr
    group_id: UUIDStr
    user_id: UUIDStr
    user_name: str
    items: list[CartItemOut] = Field(default_factory=list)
    total: Decimal


class UserTotal(BaseSchema):
    user_id: UUIDStr
    user_name: str
    total: Decimal


class GroupCart(BaseSchema):
    group_id: UUIDStr
    carts: list[CartOut] = Field(default_factory=list)
    user_totals: list[UserTotal] = Field(default_factory=list)
    group_total: Decimal


class GroupOrderSummary(BaseSchema):
    """Every cart line of the group summed per menu item."""

    group_id: UUIDStr
    restaurant_id: UUIDStr
    restaurant_name: str
    is_closed: bool
    participants: int
    items: list[ItemSummary] = Field(default_factory=list)
    total_quantity: int
    total_amount: Decimal


__all__ = [
    "CartItemAdd",
    "CartItemOut",
    "CartOut",
    "GroupCart",
    "GroupOrderSummary",
    "UserTotal",
]
