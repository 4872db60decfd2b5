# backend/sipe/core/errors.py

from typing import Any, Optional

from fastapi import status


class AppError(Exception):
    """Base for every failure a handler reports to the client.

    Rendered as ``{"error": message}`` (plus ``details`` when given) by the
    handlers in ``sipe.api.errors``.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    headers: Optional[dict[str, str]] = None

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}

    INVALID = "invalid"
    EXPIRED = "expired"

    def __init__(self, message: str, kind: str = INVALID):
        super().__init__(message)
        self.kind = kind


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
