"""
Shared fixtures: in-memory SQLite store, cheap Argon2 parameters, a breach
API stub and an HTTP client bound to the app.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from auth.password import PasswordHasher
from auth.sessions import SessionService
from config.settings import Settings
from database.session import create_engine, create_session_factory, init_models
from main import create_app
from tests.helpers import FakeClock, stub_breach_checker


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        database_url="sqlite+aiosqlite://",
        argon2_time_cost=1,
        argon2_memory_cost=1024,
        argon2_parallelism=1,
    )


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_service(clock: FakeClock) -> SessionService:
    return SessionService(clock=clock)


@pytest_asyncio.fixture
async def engine():
    engine = create_engine("sqlite+aiosqlite://")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    async with create_session_factory(engine)() as session:
        yield session


@pytest.fixture
def app(settings, engine, hasher, session_service):
    return create_app(
        settings,
        engine=engine,
        password_hasher=hasher,
        breach_checker=stub_breach_checker(),
        session_service=session_service,
    )


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
