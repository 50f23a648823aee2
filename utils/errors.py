"""
HTTP-facing error types.

Messages of these errors are shown to the client as ``{"message": ...}``,
so they must never carry internal details.
"""

from __future__ import annotations

from fastapi import status


class HttpError(Exception):
    """Error with an HTTP status code and a client-safe message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(HttpError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(HttpError):
    """Duplicate resource, e.g. an email that is already registered."""

    status_code = status.HTTP_400_BAD_REQUEST


class ForbiddenError(HttpError):
    status_code = status.HTTP_403_FORBIDDEN


class UnauthorizedError(HttpError):
    """Missing or bad credentials.

    With ``clear_session_cookie`` the error response also expires the
    client's session cookie.
    """

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized", clear_session_cookie: bool = False) -> None:
        super().__init__(message)
        self.clear_session_cookie = clear_session_cookie
