"""
FastAPI dependencies for authentication.

Provides ``db_session``, the ``AuthService`` lookup and the two route
guards: ``require_guest`` (no live session allowed) and ``require_session``
(a live session is mandatory).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncGenerator, Optional

from fastapi import Cookie, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth.service import AuthService
from auth.sessions import SESSION_COOKIE_NAME
from database.models import Session, User
from database.session import get_db_session
from utils.errors import ForbiddenError, UnauthorizedError


@dataclass
class AuthContext:
    session: Session
    user: User
    token: str


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


async def ensure_guest(db: AsyncSession, auth: AuthService, session_token: Optional[str]) -> None:
    """Fail with 403 when ``session_token`` belongs to a live session.

    Handlers that take a request body call this themselves once the body has
    been parsed, so a malformed request is rejected before any session lookup.
    """
    if not session_token:
        return
    result = await auth.sessions.validate_session_token(db, session_token)
    if result.is_valid:
        raise ForbiddenError("Already logged in")


async def require_guest(
    session_token: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE_NAME),
    db: AsyncSession = Depends(db_session),
    auth: AuthService = Depends(get_auth_service),
) -> None:
    await ensure_guest(db, auth, session_token)


async def require_session(
    session_token: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE_NAME),
    db: AsyncSession = Depends(db_session),
    auth: AuthService = Depends(get_auth_service),
) -> AuthContext:
    """Resolve the caller's live session or fail with 401 and clear the cookie."""
    if not session_token:
        raise UnauthorizedError(clear_session_cookie=True)

    result = await auth.sessions.validate_session_token(db, session_token)
    if not result.is_valid:
        raise UnauthorizedError(clear_session_cookie=True)

    return AuthContext(session=result.session, user=result.user, token=session_token)
