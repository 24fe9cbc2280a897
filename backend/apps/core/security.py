"""
Core security - authentication classes for API.
"""

import secrets

from ninja.security import HttpBearer

from config.settings.base import settings


class AdminTokenAuth(HttpBearer):
    """
    Bearer token authentication for seat and discount administration.

    The token is compared in constant time against ADMIN_API_TOKEN.
    An unset token disables the admin API entirely.
    """

    def authenticate(self, request, token: str) -> str | None:
        """Return the token when it matches, None otherwise (triggers 401)."""
        expected = settings.ADMIN_API_TOKEN
        if not expected or not token:
            return None
        if secrets.compare_digest(token, expected):
            return token
        return None
