"""
Error taxonomy for the catalog service.

Each error carries the HTTP status the API layer answers with; handlers in
``main`` turn them into ``{"detail": message}`` responses.
"""

from typing import Optional


class CatalogError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(CatalogError):
    """Missing, malformed or duplicate fields."""

    status_code = 400


class NotFoundError(CatalogError):
    status_code = 404


class AuthError(CatalogError):
    status_code = 401


class Unauthorized(AuthError):
    """No bearer token was presented."""

    status_code = 401


class Forbidden(AuthError):
    """A token was presented but could not be verified."""

    status_code = 403


class InvalidCredentialsError(AuthError):
    status_code = 401
