"""Talabat API payloads (camelCase on the wire) and sync results."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lunch_api.common.schema import BaseSchema
from lunch_api.features.restaurants.schemas import MenuItemOut, RestaurantOut


class TalabatModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TalabatRestaurant(TalabatModel):
    id: str
    name: str
    cuisine: list[str] = Field(default_factory=list)
    logo: str | None = None
    rating: float | None = None
    delivery_time: str | None = None
    minimum_order: Decimal | None = None
    delivery_fee: Decimal | None = None
    is_open: bool = True


class TalabatMenuItem(TalabatModel):
    id: str
    name: str
    description: str | None = None
    price: Decimal
    image: str | None = None
    category: str | None = None
    is_available: bool = True


class Coordinates(TalabatModel):
    latitude: float
    longitude: float


class DeliveryAddress(TalabatModel):
    street: str
    building: str
    floor: str | None = None
    apartment: str | None = None
    city: str
    area: str
    coordinates: Coordinates | None = None


class DeliveryDetails(TalabatModel):
    """Where and how the office receives a group order."""

    delivery_address: DeliveryAddress
    contact_phone: str
    payment_method: Literal["cash", "card"] = "cash"
    scheduled_time: str | None = None


class TalabatOrderLine(TalabatModel):
    item_id: str
    quantity: int
    special_instructions: str | None = None


class TalabatOrderRequest(TalabatModel):
    restaurant_id: str
    items: list[TalabatOrderLine]
    delivery_address: DeliveryAddress
    contact_phone: str
    payment_method: Literal["cash", "card"]
    scheduled_time: str | None = None


class TalabatOrderResponse(TalabatModel):
    order_id: str
    status: str
    estimated_delivery_time: str | None = None
    total_amount: Decimal | None = None
    tracking_url: str | None = None


class TalabatOrderStatus(TalabatModel):
    order_id: str
    status: str
    estimated_delivery_time: str | None = None
    driver_location: Coordinates | None = None


class TalabatCancellation(TalabatModel):
    success: bool
    message: str | None = None


class RestaurantSync(BaseSchema):
    """Outcome of importing one Talabat restaurant into the local catalog."""

    restaurant: RestaurantOut
    menu_items: list[MenuItemOut] = Field(default_factory=list)
    created: bool


__all__ = [
    "Coordinates",
    "DeliveryAddress",
    "DeliveryDetails",
    "RestaurantSync",
    "TalabatCancellation",
    "TalabatMenuItem",
    "TalabatModel",
    "TalabatOrderLine",
    "TalabatOrderRequest",
    "TalabatOrderResponse",
    "TalabatOrderStatus",
    "TalabatRestaurant",
]
