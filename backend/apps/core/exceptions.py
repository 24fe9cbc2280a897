"""
Base exception for domain errors surfaced through the API.

Each subclass carries a stable ``code`` and the HTTP status the API layer
maps it to.
"""


class DomainError(Exception):
    """Base exception for seat, pricing and payment errors."""

    code = "ERROR"
    status_code = 400

    def __init__(self, message: str = "", code: str | None = None) -> None:
        super().__init__(message or self.__class__.__doc__ or self.code)
        if code is not None:
            self.code = code

    @property
    def message(self) -> str:
        return str(self)


class NotFoundError(DomainError):
    """Referenced record was not found."""

    code = "NOT_FOUND"
    status_code = 404
