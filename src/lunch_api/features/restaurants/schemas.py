"""Pydantic schemas for restaurants and menu items."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import Field, field_validator

from lunch_api.common.ids import UUIDStr
from lunch_api.common.schema import BaseSchema


def _clean_tags(value: object) -> object:
    if value is None:
        return []
    if isinstance(value, list):
        seen: list[str] = []
        for tag in value:
            cleaned = str(tag).strip().lower()
            if cleaned and cleaned not in seen:
                seen.append(cleaned)
        return seen
    return value


class RestaurantCreate(BaseSchema):
    name: str = Field(min_length=1, max_length=255)
    cuisine: str | None = Field(default=None, max_length=100)
    description: str | None = None
    image_url: str | None = Field(default=None, max_length=1024)
    is_active: bool = True
    external_id: str | None = Field(default=None, max_length=100)


class RestaurantUpdate(BaseSchema):
    """Partial update; omitted fields are left untouched."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    cuisine: str | None = Field(default=None, max_length=100)
    description: str | None = None
    image_url: str | None = Field(default=None, max_length=1024)
    is_active: bool | None = None


class RestaurantOut(BaseSchema):
    id: UUIDStr
    name: str
    cuisine: str | None = None
    description: str | None = None
    image_url: str | None = None
    is_active: bool
    external_id: str | None = None
    created_at: datetime


class MenuItemCreate(BaseSchema):
    """Menu item payload. Price bounds are enforced by the service."""

    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    price: Decimal
    category: str | None = Field(default=None, max_length=100)
    tags: list[str] = Field(default_factory=list)
    image_url: str | None = Field(default=None, max_length=1024)
    is_available: bool = True
    external_id: str | None = Field(default=None, max_length=100)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: object) -> object:
        return _clean_tags(value)


class MenuItemUpdate(BaseSchema):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    price: Decimal | None = None
    category: str | None = Field(default=None, max_length=100)
    tags: list[str] | None = None
    image_url: str | None = Field(default=None, max_length=1024)
    is_available: bool | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: object) -> object:
        if value is None:
            return None
        return _clean_tags(value)


class MenuItemOut(BaseSchema):
    id: UUIDStr
    restaurant_id: UUIDStr
    name: str
    description: str | None = None
    price: Decimal
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    image_url: str | None = None
    is_available: bool
    external_id: str | None = None


__all__ = [
    "MenuItemCreate",
    "MenuItemOut",
    "MenuItemUpdate",
    "RestaurantCreate",
    "RestaurantOut",
    "RestaurantUpdate",
]
