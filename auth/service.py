"""
Auth flow — register, login and logout on top of the user store, the
session store and the credential checks.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.breach import BreachChecker
from auth.password import PasswordHasher
from auth.schemas import RegisterRequest
from auth.sessions import SessionService
from auth.tokens import generate_session_token
from auth.users import UserService
from database.models import Session
from utils.errors import ConflictError, UnauthorizedError, ValidationError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass
class IssuedSession:
    token: str
    session: Session


class AuthService:
    def __init__(
        self,
        users: UserService,
        sessions: SessionService,
        hasher: PasswordHasher,
        breach_checker: BreachChecker,
        check_breach_on_register: bool = True,
    ) -> None:
        self.users = users
        self.sessions = sessions
        self.hasher = hasher
        self.breach_checker = breach_checker
        self.check_breach_on_register = check_breach_on_register

    async def register(self, db: AsyncSession, data: RegisterRequest) -> IssuedSession:
        if await self.users.user_exists(db, data.email):
            raise ConflictError("Email already in use")
        if await self.users.document_exists(db, data.document):
            raise ConflictError("Document already in use")

        if self.check_breach_on_register and not await self.breach_checker.check_strength(data.password):
            raise ValidationError("Password is too weak or has appeared in a data breach")

        password_hash = await asyncio.to_thread(self.hasher.hash, data.password)
        try:
            user = await self.users.create_user(
                db,
                name=data.name,
                document=data.document,
                email=data.email,
                password_hash=password_hash,
            )
        except IntegrityError:
            # lost a race against a concurrent registration
            await db.rollback()
            raise ConflictError("Email or document already in use")

        # the session commit also commits the flushed user
        issued = await self._issue_session(db, user.id)
        logger.info("Registered user %s", user.id)
        return issued

    async def login(self, db: AsyncSession, email: str, password: str) -> IssuedSession:
        user = await self.users.get_user_by_email(db, email)
        if user is None:
            await asyncio.to_thread(self.hasher.dummy_verify, password)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not await asyncio.to_thread(self.hasher.verify, password, user.password):
            raise UnauthorizedError(INVALID_CREDENTIALS)

        issued = await self._issue_session(db, user.id)
        logger.info("Login: user %s", user.id)
        return issued

    async def logout(self, db: AsyncSession, session: Session) -> None:
        await self.sessions.invalidate_session(db, session.id)
        logger.info("Logout: user %s", session.user_id)

    async def _issue_session(self, db: AsyncSession, user_id: int) -> IssuedSession:
        token = generate_session_token()
        session = await self.sessions.create_session(db, token, user_id)
        return IssuedSession(token=token, session=session)
