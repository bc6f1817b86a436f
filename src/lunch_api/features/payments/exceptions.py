"""Domain exceptions for payment settlement."""

from __future__ import annotations

from lunch_api.common.errors import AppError

__all__ = ["PaymentAlreadySettledError", "PaymentNotFoundError"]


class PaymentNotFoundError(AppError):
    code = "PAYMENT_NOT_FOUND"
    default_message = "Payment not found"


class PaymentAlreadySettledError(AppError):
    """Raised when a member tries to self-report a payment the owner already marked paid."""

    code = "PAYMENT_ALREADY_SETTLED"
    default_message = "Payment has already been confirmed as paid"
