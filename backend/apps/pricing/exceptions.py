"""
Exceptions for pricing.
"""

from apps.core.exceptions import DomainError, NotFoundError


class PricingError(DomainError):
    """Base exception for fee and discount errors."""


class DiscountNotFoundError(NotFoundError):
    """Discount does not exist."""

    code = "DISCOUNT_NOT_FOUND"


class DiscountConflictError(PricingError):
    """The contact already has a live discount."""

    code = "CONFLICT"
    status_code = 409


class DiscountStateError(PricingError):
    """Discount is not in a state that allows the operation."""

    code = "INVALID_DISCOUNT_STATE"


class DiscountValidationError(PricingError):
    """Discount fields are invalid."""

    code = "VALIDATION_ERROR"


class FeeValidationError(PricingError):
    """Fee purpose is missing or unknown."""

    code = "VALIDATION_ERROR"
