"""
Session store — create, validate (with sliding renewal) and invalidate
cookie sessions, plus the cookie helpers.

Sessions are keyed by ``session_id_from_token(token)``; only the client ever
holds the raw token. Expired rows are removed lazily on validation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from fastapi import Response
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from auth.tokens import session_id_from_token
from database.models import Session, User

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "session"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class SessionValidationResult:
    session: Optional[Session] = None
    user: Optional[User] = None

    @property
    def is_valid(self) -> bool:
        return self.session is not None


class SessionService:
    """Session lifecycle over the ``sessions`` table."""

    def __init__(
        self,
        lifetime: timedelta = timedelta(days=30),
        renewal_window: timedelta = timedelta(days=15),
        secure_cookies: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.lifetime = lifetime
        self.renewal_window = renewal_window
        self.secure_cookies = secure_cookies
        self._clock = clock

    async def create_session(self, db: AsyncSession, token: str, user_id: int) -> Session:
        """Persist a new session for ``user_id``.

        A ``user_id`` without a matching user fails with the store's
        ``IntegrityError``.
        """
        session = Session(
            id=session_id_from_token(token),
            user_id=user_id,
            expires_at=self._clock() + self.lifetime,
        )
        db.add(session)
        await db.commit()
        return session

    async def validate_session_token(self, db: AsyncSession, token: str) -> SessionValidationResult:
        session_id = session_id_from_token(token)
        result = await db.execute(
            select(Session, User)
            .join(User, Session.user_id == User.id)
            .where(Session.id == session_id)
        )
        row = result.first()
        if row is None:
            return SessionValidationResult()

        session, user = row
        now = self._clock()
        expires_at = _as_utc(session.expires_at)

        if now >= expires_at:
            await db.execute(delete(Session).where(Session.id == session.id))
            await db.commit()
            logger.debug("Session for user %s expired", user.id)
            return SessionValidationResult()

        if now >= expires_at - self.renewal_window:
            expires_at = now + self.lifetime
            await db.execute(
                update(Session).where(Session.id == session.id).values(expires_at=expires_at)
            )
            await db.commit()

        set_committed_value(session, "expires_at", expires_at)
        return SessionValidationResult(session=session, user=user)

    async def invalidate_session(self, db: AsyncSession, session_id: str) -> None:
        await db.execute(delete(Session).where(Session.id == session_id))
        await db.commit()

    async def invalidate_user_sessions(self, db: AsyncSession, user_id: int) -> None:
        await db.execute(delete(Session).where(Session.user_id == user_id))
        await db.commit()

    # ── Cookies ────────────────────────────────────────────────────────

    def set_session_token_cookie(
        self,
        response: Response,
        token: str,
        expires_at: datetime | None = None,
    ) -> None:
        expires_at = expires_at or self._clock() + self.lifetime
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=token,
            expires=_as_utc(expires_at),
            path="/",
            secure=self.secure_cookies,
            httponly=True,
            samesite="lax",
        )

    def delete_session_token_cookie(self, response: Response) -> None:
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value="",
            max_age=0,
            path="/",
            secure=self.secure_cookies,
            httponly=True,
            samesite="lax",
        )
