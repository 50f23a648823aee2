"""
Tests for the session store: creation, lazy expiry, sliding renewal,
invalidation and the cookie helpers.
"""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from fastapi import Response
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from auth.sessions import SessionService
from auth.tokens import generate_session_token, session_id_from_token
from database.models import Session, User
from tests.helpers import T0

DAY = timedelta(days=1)


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None)


@pytest_asyncio.fixture
async def user(db):
    user = User(name="Test User", document="12345678900", email="test@example.com", password="x")
    db.add(user)
    await db.commit()
    return user


async def _stored_expiry(db, session_id: str):
    db.expire_all()
    row = (await db.execute(select(Session).where(Session.id == session_id))).scalar_one_or_none()
    return None if row is None else _naive(row.expires_at)


class TestCreateSession:
    @pytest.mark.asyncio
    async def test_persists_hashed_id_and_30_day_expiry(self, db, user, session_service):
        token = generate_session_token()
        session = await session_service.create_session(db, token, user.id)

        assert session.id == session_id_from_token(token)
        assert session.user_id == user.id
        assert session.expires_at == T0 + 30 * DAY
        assert await _stored_expiry(db, session.id) == _naive(T0 + 30 * DAY)

    @pytest.mark.asyncio
    async def test_raw_token_is_not_stored(self, db, user, session_service):
        token = generate_session_token()
        await session_service.create_session(db, token, user.id)
        ids = (await db.execute(select(Session.id))).scalars().all()
        assert token not in ids

    @pytest.mark.asyncio
    async def test_unknown_user_is_rejected_by_the_store(self, db, session_service):
        with pytest.raises(IntegrityError):
            await session_service.create_session(db, generate_session_token(), 999)
        await db.rollback()


class TestValidateSessionToken:
    @pytest.mark.asyncio
    async def test_unknown_token(self, db, user, session_service):
        result = await session_service.validate_session_token(db, generate_session_token())
        assert result.session is None
        assert result.user is None
        assert not result.is_valid

    @pytest.mark.asyncio
    async def test_fresh_session_is_valid(self, db, user, session_service):
        token = generate_session_token()
        created = await session_service.create_session(db, token, user.id)

        result = await session_service.validate_session_token(db, token)

        assert result.is_valid
        assert result.session.id == created.id
        assert result.user.id == user.id
        assert result.session.expires_at == T0 + 30 * DAY

    @pytest.mark.asyncio
    async def test_not_renewed_outside_window(self, db, user, session_service, clock):
        token = generate_session_token()
        await session_service.create_session(db, token, user.id)

        clock.advance(15 * DAY - timedelta(seconds=1))
        result = await session_service.validate_session_token(db, token)

        assert result.session.expires_at == T0 + 30 * DAY
        assert await _stored_expiry(db, result.session.id) == _naive(T0 + 30 * DAY)

    @pytest.mark.asyncio
    async def test_renewed_at_window_start(self, db, user, session_service, clock):
        token = generate_session_token()
        await session_service.create_session(db, token, user.id)

        clock.advance(15 * DAY)
        result = await session_service.validate_session_token(db, token)

        assert result.session.expires_at == clock.now + 30 * DAY

    @pytest.mark.asyncio
    async def test_renewed_inside_window(self, db, user, session_service, clock):
        token = generate_session_token()
        await session_service.create_session(db, token, user.id)

        clock.advance(15 * DAY + timedelta(seconds=1))
        result = await session_service.validate_session_token(db, token)

        expected = clock.now + 30 * DAY
        assert result.session.expires_at == expected
        assert await _stored_expiry(db, result.session.id) == _naive(expected)

    @pytest.mark.asyncio
    async def test_renewed_one_second_before_expiry(self, db, user, session_service, clock):
        token = generate_session_token()
        await session_service.create_session(db, token, user.id)

        clock.advance(30 * DAY - timedelta(seconds=1))
        result = await session_service.validate_session_token(db, token)

        assert result.is_valid
        assert result.session.expires_at == clock.now + 30 * DAY

    @pytest.mark.asyncio
    async def test_expired_session_is_deleted(self, db, user, session_service, clock):
        token = generate_session_token()
        await session_service.create_session(db, token, user.id)

        clock.advance(30 * DAY)
        first = await session_service.validate_session_token(db, token)
        second = await session_service.validate_session_token(db, token)

        assert not first.is_valid
        assert not second.is_valid
        assert await _stored_expiry(db, session_id_from_token(token)) is None

    @pytest.mark.asyncio
    async def test_expiry_read_back_from_store(self, engine, db, user, session_service, clock):
        from database.session import create_session_factory

        token = generate_session_token()
        await session_service.create_session(db, token, user.id)

        # a new unit of work loads the row from the database, not the identity map
        async with create_session_factory(engine)() as other:
            clock.advance(DAY)
            result = await session_service.validate_session_token(other, token)
            assert result.session.expires_at == T0 + 30 * DAY

            clock.advance(30 * DAY)
            assert not (await session_service.validate_session_token(other, token)).is_valid


class TestInvalidate:
    @pytest.mark.asyncio
    async def test_invalidate_session(self, db, user, session_service):
        token = generate_session_token()
        session = await session_service.create_session(db, token, user.id)

        await session_service.invalidate_session(db, session.id)

        assert not (await session_service.validate_session_token(db, token)).is_valid

    @pytest.mark.asyncio
    async def test_invalidate_is_idempotent(self, db, user, session_service):
        await session_service.invalidate_session(db, "0" * 64)
        await session_service.invalidate_session(db, "0" * 64)

    @pytest.mark.asyncio
    async def test_invalidate_user_sessions(self, db, user, session_service):
        tokens = [generate_session_token() for _ in range(3)]
        for token in tokens:
            await session_service.create_session(db, token, user.id)

        await session_service.invalidate_user_sessions(db, user.id)

        for token in tokens:
            assert not (await session_service.validate_session_token(db, token)).is_valid


class TestCookies:
    def test_set_cookie_attributes(self, session_service):
        response = Response()
        session_service.set_session_token_cookie(response, "tok", T0 + 30 * DAY)
        header = response.headers["set-cookie"]

        assert header.startswith("session=tok;")
        assert "HttpOnly" in header
        assert "SameSite=lax" in header
        assert "Path=/" in header
        assert "Secure" not in header
        assert "expires=Fri, 31 Jan 2025 12:00:00 GMT" in header

    def test_secure_in_production(self):
        service = SessionService(secure_cookies=True)
        response = Response()
        service.set_session_token_cookie(response, "tok")
        assert "Secure" in response.headers["set-cookie"]

    def test_delete_cookie(self, session_service):
        response = Response()
        session_service.delete_session_token_cookie(response)
        header = response.headers["set-cookie"]

        assert header.startswith('session="";') or header.startswith("session=;")
        assert "Max-Age=0" in header
        assert "HttpOnly" in header
        assert "Path=/" in header
