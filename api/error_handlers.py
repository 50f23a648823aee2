"""
Exception → JSON response mapping.

Every error body has the shape ``{"message": str}``. Only ``HttpError``
messages and validation messages reach the client; anything else becomes a
generic 500.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from utils.errors import HttpError, UnauthorizedError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"

_REQUIRED_ERROR_TYPES = {"missing", "string_type"}


def _json_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def first_validation_message(exc: RequestValidationError) -> str:
    """Human-readable message for the first violation in ``exc``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request body"

    error = errors[0]
    loc = [part for part in error.get("loc", ()) if part != "body"]
    if error.get("type") == "json_invalid" or not loc:
        return "Invalid request body"
    if error.get("type") in _REQUIRED_ERROR_TYPES:
        return f"{str(loc[-1]).capitalize()} is required"
    return error.get("msg", "Invalid request body")


async def http_error_handler(request: Request, exc: HttpError) -> JSONResponse:
    response = _json_error(exc.status_code, exc.message)
    if isinstance(exc, UnauthorizedError) and exc.clear_session_cookie:
        request.app.state.auth_service.sessions.delete_session_token_cookie(response)
    return response


async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return _json_error(status.HTTP_400_BAD_REQUEST, first_validation_message(exc))


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _json_error(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Generic 500 for anything unhandled.

    Starlette runs this from ``ServerErrorMiddleware``, which re-raises after
    responding so the server logs the traceback. Only a one-line record is
    written here.
    """
    logger.error("Unexpected %s on %s %s", type(exc).__name__, request.method, request.url.path)
    return _json_error(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HttpError, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
