"""
Global middleware.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import Settings

logger = logging.getLogger(__name__)

_SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}
_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data", "text/plain")


def _is_cross_origin_form(request: Request) -> bool:
    if request.method in _SAFE_METHODS:
        return False
    content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if content_type not in _FORM_CONTENT_TYPES:
        return False
    origin = request.headers.get("origin")
    expected = f"{request.url.scheme}://{request.url.netloc}"
    return origin != expected


def register_middleware(app: FastAPI, settings: Settings) -> None:
    """Attach any app-level middleware."""

    if settings.is_production:

        @app.middleware("http")
        async def csrf_origin_check(request: Request, call_next):
            # Browsers can post forms cross-site without a preflight
            if _is_cross_origin_form(request):
                logger.warning(
                    "Rejected cross-origin %s %s from %s",
                    request.method,
                    request.url.path,
                    request.headers.get("origin"),
                )
                return JSONResponse(status_code=403, content={"message": "Forbidden"})
            return await call_next(request)

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug("%s %s — %.3fs", request.method, request.url.path, elapsed)
        return response
