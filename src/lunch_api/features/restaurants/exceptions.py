"""Domain exceptions for restaurants and menus."""

from __future__ import annotations

from lunch_api.common.errors import AppError

__all__ = [
    "InvalidPriceError",
    "MenuItemInUseError",
    "MenuItemNotFoundError",
    "NoMenuItemsError",
    "RestaurantNotFoundError",
]


class RestaurantNotFoundError(AppError):
    code = "RESTAURANT_NOT_FOUND"
    default_message = "Restaurant not found"


class MenuItemNotFoundError(AppError):
    code = "MENU_ITEM_NOT_FOUND"
    default_message = "Menu item not found"


class InvalidPriceError(AppError):
    code = "INVALID_PRICE"
    default_message = "Price must be zero or greater"


class NoMenuItemsError(AppError):
    code = "NO_ITEMS"
    default_message = "At least one menu item is required"


class MenuItemInUseError(AppError):
    """Raised when deleting a menu item that existing orders reference."""

    code = "MENU_ITEM_IN_USE"
    default_message = "Menu item is referenced by existing orders"
