"""Flat error taxonomy keyed by string codes.

Domain errors only carry a code and a message. The HTTP status is resolved
once, at the error-handling boundary, through :func:`status_for_code`.
"""

from __future__ import annotations

from typing import Any, ClassVar

from fastapi import status

__all__ = [
    "AppError",
    "ERROR_STATUS",
    "INTERNAL_ERROR",
    "INVALID_INPUT",
    "NOT_FOUND",
    "RATE_LIMIT_EXCEEDED",
    "code_for_status",
    "status_for_code",
]

NOT_FOUND = "NOT_FOUND"
INVALID_INPUT = "INVALID_INPUT"
RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
INTERNAL_ERROR = "INTERNAL_ERROR"


class AppError(RuntimeError):
    """Base class for every domain error surfaced to callers."""

    code: ClassVar[str] = INTERNAL_ERROR
    default_message: ClassVar[str] = "An unexpected error occurred"

    def __init__(self, message: str | None = None, *, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


ERROR_STATUS: dict[str, int] = {
    # generic
    NOT_FOUND: status.HTTP_404_NOT_FOUND,
    INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    RATE_LIMIT_EXCEEDED: status.HTTP_429_TOO_MANY_REQUESTS,
    INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    "UNAUTHORIZED": status.HTTP_403_FORBIDDEN,
    # users
    "EMAIL_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    # restaurants / menus
    "INVALID_PRICE": status.HTTP_400_BAD_REQUEST,
    "NO_ITEMS": status.HTTP_400_BAD_REQUEST,
    "MENU_ITEM_IN_USE": status.HTTP_409_CONFLICT,
    # voting
    "VOTING_NOT_STARTED": status.HTTP_400_BAD_REQUEST,
    "VOTING_ENDED": status.HTTP_400_BAD_REQUEST,
    "ALREADY_VOTED": status.HTTP_400_BAD_REQUEST,
    "RESTAURANT_NOT_AVAILABLE": status.HTTP_400_BAD_REQUEST,
    "RESTAURANT_NOT_AVAILABLE_TODAY": status.HTTP_400_BAD_REQUEST,
    "NO_VOTES": status.HTTP_400_BAD_REQUEST,
    # orders
    "VOTING_NOT_COMPLETE": status.HTTP_400_BAD_REQUEST,
    "NOT_WINNING_RESTAURANT": status.HTTP_400_BAD_REQUEST,
    "ORDER_ALREADY_EXISTS": status.HTTP_400_BAD_REQUEST,
    "INVALID_RESTAURANT": status.HTTP_400_BAD_REQUEST,
    "ITEM_NOT_AVAILABLE": status.HTTP_400_BAD_REQUEST,
    "INVALID_QUANTITY": status.HTTP_400_BAD_REQUEST,
    "ALREADY_CANCELLED": status.HTTP_400_BAD_REQUEST,
    "CANNOT_CANCEL_CONFIRMED": status.HTTP_400_BAD_REQUEST,
    "INVALID_EXPORT_FORMAT": status.HTTP_400_BAD_REQUEST,
    # groups
    "INVALID_DURATION": status.HTTP_400_BAD_REQUEST,
    "JOIN_CODE_EXHAUSTED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "GROUP_ACCESS_DENIED": status.HTTP_403_FORBIDDEN,
    "GROUP_CLOSED": status.HTTP_409_CONFLICT,
    "GROUP_EXPIRED": status.HTTP_409_CONFLICT,
    "GROUP_STILL_OPEN": status.HTTP_409_CONFLICT,
    "GROUP_FULL": status.HTTP_409_CONFLICT,
    "ALREADY_MEMBER": status.HTTP_409_CONFLICT,
    "JOIN_CODE_REQUIRED": status.HTTP_400_BAD_REQUEST,
    "INVALID_JOIN_CODE_FORMAT": status.HTTP_400_BAD_REQUEST,
    "INVALID_JOIN_CODE": status.HTTP_403_FORBIDDEN,
    "NOT_GROUP_OWNER": status.HTTP_403_FORBIDDEN,
    "NOT_GROUP_MEMBER": status.HTTP_403_FORBIDDEN,
    # carts
    "NOT_CART_OWNER": status.HTTP_403_FORBIDDEN,
    # payments
    "PAYMENTS_OUTSTANDING": status.HTTP_409_CONFLICT,
    "PAYMENT_ALREADY_SETTLED": status.HTTP_409_CONFLICT,
    # talabat
    "TALABAT_NOT_CONFIGURED": status.HTTP_503_SERVICE_UNAVAILABLE,
    "TALABAT_CONNECTION_ERROR": status.HTTP_503_SERVICE_UNAVAILABLE,
    "TALABAT_API_ERROR": status.HTTP_502_BAD_GATEWAY,
    "RESTAURANT_NOT_LINKED": status.HTTP_400_BAD_REQUEST,
    "MENU_ITEM_NOT_LINKED": status.HTTP_400_BAD_REQUEST,
}

_STATUS_CODES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: INVALID_INPUT,
    status.HTTP_401_UNAUTHORIZED: "UNAUTHENTICATED",
    status.HTTP_403_FORBIDDEN: "UNAUTHORIZED",
    status.HTTP_404_NOT_FOUND: NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: "CONFLICT",
    422: INVALID_INPUT,
    status.HTTP_429_TOO_MANY_REQUESTS: RATE_LIMIT_EXCEEDED,
}


def status_for_code(code: str) -> int:
    """Return the HTTP status for ``code``; ``*_NOT_FOUND`` codes map to 404."""

    mapped = ERROR_STATUS.get(code)
    if mapped is not None:
        return mapped
    if code.endswith("_NOT_FOUND"):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def code_for_status(status_code: int) -> str:
    """Return a generic error code for a bare HTTP status."""

    if status_code in _STATUS_CODES:
        return _STATUS_CODES[status_code]
    if status_code >= 500:
        return INTERNAL_ERROR
    return "HTTP_ERROR"
