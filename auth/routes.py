"""
Auth API routes — register, login, me, logout.

Route prefix: /api/auth
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import AuthContext, db_session, ensure_guest, get_auth_service, require_session
from auth.schemas import LoginRequest, MeResponse, RegisterRequest, UserView
from auth.service import AuthService
from auth.sessions import SESSION_COOKIE_NAME

router = APIRouter(tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    session: AsyncSession = Depends(db_session),
    auth: AuthService = Depends(get_auth_service),
    session_token: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> Response:
    """Register a new user and start a session."""
    await ensure_guest(session, auth, session_token)
    issued = await auth.register(session, req)
    response = Response(status_code=status.HTTP_201_CREATED)
    auth.sessions.set_session_token_cookie(response, issued.token, issued.session.expires_at)
    return response


@router.post("/login", status_code=status.HTTP_204_NO_CONTENT)
async def login(
    req: LoginRequest,
    session: AsyncSession = Depends(db_session),
    auth: AuthService = Depends(get_auth_service),
    session_token: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> Response:
    """Login with email + password."""
    await ensure_guest(session, auth, session_token)
    issued = await auth.login(session, req.email, req.password)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    auth.sessions.set_session_token_cookie(response, issued.token, issued.session.expires_at)
    return response


@router.get("/me", response_model=MeResponse)
async def me(
    response: Response,
    ctx: AuthContext = Depends(require_session),
    auth: AuthService = Depends(get_auth_service),
) -> MeResponse:
    """Current user profile; refreshes the session cookie."""
    auth.sessions.set_session_token_cookie(response, ctx.token, ctx.session.expires_at)
    return MeResponse(user=UserView.model_validate(ctx.user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    ctx: AuthContext = Depends(require_session),
    session: AsyncSession = Depends(db_session),
    auth: AuthService = Depends(get_auth_service),
) -> Response:
    await auth.logout(session, ctx.session)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    auth.sessions.delete_session_token_cookie(response)
    return response
