"""Domain exceptions for the Talabat delivery integration."""

from __future__ import annotations

from typing import Any

from lunch_api.common.errors import AppError

__all__ = [
    "MenuItemNotLinkedError",
    "RestaurantNotLinkedError",
    "TalabatApiError",
    "TalabatConnectionError",
    "TalabatNotConfiguredError",
]


class TalabatNotConfiguredError(AppError):
    code = "TALABAT_NOT_CONFIGURED"
    default_message = "Talabat integration is not configured"


class TalabatConnectionError(AppError):
    code = "TALABAT_CONNECTION_ERROR"
    default_message = "Failed to connect to Talabat"


class TalabatApiError(AppError):
    """Talabat answered with an error status; ``upstream_status`` keeps it."""

    code = "TALABAT_API_ERROR"
    default_message = "Talabat API error"

    def __init__(
        self, message: str | None = None, *, upstream_status: int, details: Any = None
    ) -> None:
        super().__init__(message, details=details)
        self.upstream_status = upstream_status


class RestaurantNotLinkedError(AppError):
    code = "RESTAURANT_NOT_LINKED"
    default_message = "Restaurant is not linked to a Talabat restaurant"


class MenuItemNotLinkedError(AppError):
    code = "MENU_ITEM_NOT_LINKED"
    default_message = "Menu item is not linked to a Talabat menu item"
