"""Domain exceptions for group carts."""

from __future__ import annotations

from lunch_api.common.errors import AppError

__all__ = ["CartItemNotFoundError", "NotCartOwnerError"]


class CartItemNotFoundError(AppError):
    code = "CART_ITEM_NOT_FOUND"
    default_message = "Cart item not found"


class NotCartOwnerError(AppError):
    code = "NOT_CART_OWNER"
    default_message = "You can only modify your own cart items"
