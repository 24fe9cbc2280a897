"""
Exceptions for seat allocation.
"""

from apps.core.exceptions import DomainError, NotFoundError


class SeatError(DomainError):
    """Base exception for seat allocation errors."""


class SeatValidationError(SeatError):
    """Seat request is malformed."""

    code = "VALIDATION_ERROR"


class MissingLocationError(SeatValidationError):
    """The geo reference required by the level is missing."""

    code = "MISSING_LOCATION"


class SeatNotFoundError(NotFoundError):
    """Membership (seat) does not exist."""

    code = "MEMBERSHIP_NOT_FOUND"


class CapacityError(SeatError):
    """No seat left in the bucket."""

    code = "NO_SEATS_DESIGNATION"
    status_code = 409


class SeatStateError(SeatError):
    """Seat is not in a state that allows the operation."""

    code = "INVALID_SEAT_STATE"
    status_code = 409
