"""
Exceptions for payment-first registration.
"""

from apps.core.exceptions import DomainError, NotFoundError


class PaymentError(DomainError):
    """Base exception for payment intent errors."""


class PaymentIntentNotFoundError(NotFoundError):
    """Payment intent does not exist."""

    code = "ORDER_NOT_FOUND"


class InvalidSignatureError(PaymentError):
    """Provider signature did not verify."""

    code = "INVALID_SIGNATURE"


class MissingSignatureError(PaymentError):
    """Provider signature is required but was not supplied."""

    code = "MISSING_PG_SIGNATURE"


class InvalidTransitionError(PaymentError):
    """Payment intent cannot move to the requested status."""

    code = "INVALID_TRANSITION"
    status_code = 409


class SoldOutError(PaymentError):
    """Payment succeeded but the seat is gone; the payment must be refunded."""

    code = "SOLD_OUT"
    status_code = 409
    refund_required = True

    def __init__(self, message: str = "", reason: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason


class ProviderError(PaymentError):
    """Payment provider call failed."""

    code = "PROVIDER_ERROR"
    status_code = 502


class PaymentValidationError(PaymentError):
    """Payment request is malformed."""

    code = "VALIDATION_ERROR"
