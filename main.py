"""
Session auth API — application entry point.
"""

from __future__ import annotations

import logging
import sys
from datetime import timedelta
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from api.error_handlers import register_exception_handlers
from api.middleware import register_middleware
from api.routes import router as example_router
from auth.breach import BreachChecker
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from auth.service import AuthService
from auth.sessions import SessionService
from auth.users import UserService
from config.settings import Settings, config
from database.session import create_engine, create_session_factory, init_models

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "sqlalchemy.engine", "aiosqlite", "asyncio"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def build_auth_service(
    settings: Settings,
    *,
    password_hasher: Optional[PasswordHasher] = None,
    breach_checker: Optional[BreachChecker] = None,
    session_service: Optional[SessionService] = None,
    user_service: Optional[UserService] = None,
) -> AuthService:
    """Wire the auth services from settings; any of them can be swapped in."""
    return AuthService(
        users=user_service or UserService(),
        sessions=session_service
        or SessionService(
            lifetime=timedelta(days=settings.session_lifetime_days),
            renewal_window=timedelta(days=settings.session_renewal_days),
            secure_cookies=settings.is_production,
        ),
        hasher=password_hasher
        or PasswordHasher(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
        ),
        breach_checker=breach_checker
        or BreachChecker(
            base_url=settings.pwned_passwords_url,
            timeout=settings.breach_check_timeout,
            fail_open=settings.breach_check_fail_open,
        ),
        check_breach_on_register=settings.breach_check_on_register,
    )


def create_app(
    settings: Settings = config,
    *,
    engine: Optional[AsyncEngine] = None,
    password_hasher: Optional[PasswordHasher] = None,
    breach_checker: Optional[BreachChecker] = None,
    session_service: Optional[SessionService] = None,
    user_service: Optional[UserService] = None,
) -> FastAPI:
    app = FastAPI(
        title="Session Auth API",
        version="1.0.0",
        description="User registration, login and cookie sessions.",
    )

    engine = engine or create_engine(settings.database_url, echo=settings.debug)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.auth_service = build_auth_service(
        settings,
        password_hasher=password_hasher,
        breach_checker=breach_checker,
        session_service=session_service,
        user_service=user_service,
    )

    # CORS
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_middleware(app, settings)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(example_router, prefix="/api")

    @app.on_event("startup")
    async def on_startup():
        await init_models(engine)
        logger.info("Application ready to accept requests (%s).", settings.environment)

    @app.on_event("shutdown")
    async def on_shutdown():
        await engine.dispose()

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
