"""Domain exceptions for user accounts."""

from __future__ import annotations

from lunch_api.common.errors import AppError

__all__ = ["EmailAlreadyExistsError", "UserNotFoundError"]


class UserNotFoundError(AppError):
    """Raised when a user cannot be located."""

    code = "USER_NOT_FOUND"
    default_message = "User not found"


class EmailAlreadyExistsError(AppError):
    """Raised when the canonical email is already registered."""

    code = "EMAIL_ALREADY_EXISTS"
    default_message = "A user with this email already exists"
