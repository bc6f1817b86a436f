"""Domain exceptions for orders."""

from __future__ import annotations

from lunch_api.common.errors import AppError

__all__ = [
    "AlreadyCancelledError",
    "CannotCancelConfirmedError",
    "InvalidExportFormatError",
    "InvalidQuantityError",
    "InvalidRestaurantError",
    "ItemNotAvailableError",
    "NoOrderItemsError",
    "NotWinningRestaurantError",
    "OrderAlreadyExistsError",
    "OrderNotFoundError",
    "OrderUnauthorizedError",
    "VotingNotCompleteError",
]


class OrderNotFoundError(AppError):
    code = "ORDER_NOT_FOUND"
    default_message = "Order not found"


class OrderUnauthorizedError(AppError):
    """Raised when a user touches someone else's order."""

    code = "UNAUTHORIZED"
    default_message = "You are not allowed to access this order"


class VotingNotCompleteError(AppError):
    code = "VOTING_NOT_COMPLETE"
    default_message = "Voting must be complete before placing orders"


class NotWinningRestaurantError(AppError):
    code = "NOT_WINNING_RESTAURANT"
    default_message = "Orders can only be placed for the winning restaurant"


class OrderAlreadyExistsError(AppError):
    code = "ORDER_ALREADY_EXISTS"
    default_message = "You have already placed an order for today"


class NoOrderItemsError(AppError):
    code = "NO_ITEMS"
    default_message = "Order must contain at least one item"


class InvalidRestaurantError(AppError):
    """Raised when a menu item belongs to a different restaurant."""

    code = "INVALID_RESTAURANT"
    default_message = "All items must be from the same restaurant"


class ItemNotAvailableError(AppError):
    code = "ITEM_NOT_AVAILABLE"
    default_message = "Menu item is not available"


class InvalidQuantityError(AppError):
    code = "INVALID_QUANTITY"
    default_message = "Quantity must be greater than 0"


class AlreadyCancelledError(AppError):
    code = "ALREADY_CANCELLED"
    default_message = "Order is already cancelled"


class CannotCancelConfirmedError(AppError):
    code = "CANNOT_CANCEL_CONFIRMED"
    default_message = "Cannot cancel confirmed order"


class InvalidExportFormatError(AppError):
    code = "INVALID_EXPORT_FORMAT"
    default_message = "Export format must be one of: text, csv, json"
