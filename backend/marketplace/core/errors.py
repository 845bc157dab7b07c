# marketplace/core/errors.py
"""
Domain error taxonomy.

Services raise these instead of HTTPException so they stay usable outside a
request; the handlers in ``marketplace.main`` turn them into the JSON envelope.
"""
import uuid

from fastapi import status


class AppError(Exception):
    """Base class for all errors that map to a client-visible response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "SERVER_ERROR"

    def __init__(self, message: str, *, code: str | None = None, data: dict | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.data = data


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class Conflict(AppError):
    """Uniqueness violation."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "CONFLICT"


class NotFound(AppError):
    """Unresolved or malformed identity."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class Forbidden(AppError):
    """Authenticated, but not allowed to touch this resource."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class Unauthorized(AppError):
    """Missing, invalid or rejected credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"


class ServerError(AppError):
    """Unexpected failure; the detail is logged, never returned."""


def parse_id(value, what: str = "Resource") -> uuid.UUID:
    """
    Parse a path/body identifier into a UUID.

    A malformed id can never resolve, so it is reported as NotFound.
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise NotFound(f"{what} not found") from None
