"""Domain exceptions for group membership and lifecycle."""

from __future__ import annotations

from lunch_api.common.errors import AppError

__all__ = [
    "AlreadyMemberError",
    "GroupAccessDeniedError",
    "GroupClosedError",
    "GroupExpiredError",
    "GroupFullError",
    "GroupNotFoundError",
    "GroupStillOpenError",
    "InvalidDurationError",
    "InvalidJoinCodeError",
    "InvalidJoinCodeFormatError",
    "JoinCodeExhaustedError",
    "JoinCodeRequiredError",
    "NotGroupMemberError",
    "NotGroupOwnerError",
    "PaymentsOutstandingError",
]


class GroupNotFoundError(AppError):
    code = "GROUP_NOT_FOUND"
    default_message = "Group not found"


class InvalidDurationError(AppError):
    code = "INVALID_DURATION"
    default_message = "Group duration is outside the allowed range"


class JoinCodeExhaustedError(AppError):
    """Raised when no unused join code was found within the attempt budget."""

    code = "JOIN_CODE_EXHAUSTED"
    default_message = "Failed to generate a unique join code"


class GroupAccessDeniedError(AppError):
    code = "GROUP_ACCESS_DENIED"
    default_message = "Access denied to private group"


class GroupClosedError(AppError):
    code = "GROUP_CLOSED"
    default_message = "Group is closed"


class GroupExpiredError(AppError):
    code = "GROUP_EXPIRED"
    default_message = "Group has expired"


class GroupStillOpenError(AppError):
    code = "GROUP_STILL_OPEN"
    default_message = "Group is still open"


class GroupFullError(AppError):
    code = "GROUP_FULL"
    default_message = "Group is full"


class AlreadyMemberError(AppError):
    code = "ALREADY_MEMBER"
    default_message = "Already a member of this group"


class JoinCodeRequiredError(AppError):
    code = "JOIN_CODE_REQUIRED"
    default_message = "Join code required for private group"


class InvalidJoinCodeFormatError(AppError):
    code = "INVALID_JOIN_CODE_FORMAT"
    default_message = "Join code must look like XXXX-XXXX"


class InvalidJoinCodeError(AppError):
    code = "INVALID_JOIN_CODE"
    default_message = "Invalid join code"


class NotGroupOwnerError(AppError):
    code = "NOT_GROUP_OWNER"
    default_message = "Only the group owner can do this"


class NotGroupMemberError(AppError):
    code = "NOT_GROUP_MEMBER"
    default_message = "Not a member of this group"


class PaymentsOutstandingError(AppError):
    code = "PAYMENTS_OUTSTANDING"
    default_message = "Cannot delete group until all payments are confirmed"
