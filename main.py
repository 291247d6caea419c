"""
Credential & session service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api.error_handlers import register_error_handlers
from api.middleware import register_middleware
from auth.jwt import TokenService
from auth.password import CredentialHasher
from auth.routes import router as auth_router
from auth.service import AuthenticationFlow, RegistrationFlow, SessionLookup
from auth.store import UserStore
from config.settings import Settings, config
from database.session import build_engine, build_session_factory, init_models

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("sqlalchemy.engine", "asyncio"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> FastAPI:
    """
    Build the application.

    ``settings`` defaults to the environment-loaded ``config``.  A caller
    that already owns a database handle passes ``session_factory``; it is
    used as-is and never disposed here.  Otherwise an engine is built from
    ``settings.database_url`` and its schema is created on startup.

    Raises ``MissingSecretError`` when no signing secret is configured.
    """
    settings = settings or config

    # fail before anything else is wired up
    tokens = TokenService(settings.jwt_secret, settings.jwt_expiry_seconds)

    engine = None
    if session_factory is None:
        engine = build_engine(settings.database_url, echo=settings.debug)
        session_factory = build_session_factory(engine)

    store = UserStore(session_factory)
    hasher = CredentialHasher(rounds=settings.bcrypt_rounds)

    app = FastAPI(
        title="Credential & Session Service",
        version="1.0.0",
        description="Signup, signin and bearer-token identity lookup.",
    )
    app.state.registration = RegistrationFlow(store, hasher, tokens)
    app.state.authentication = AuthenticationFlow(store, hasher, tokens)
    app.state.session_lookup = SessionLookup(store, tokens)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_middleware(app)
    register_error_handlers(app)

    app.include_router(auth_router, prefix=settings.auth_prefix)

    if engine is not None:

        @app.on_event("startup")
        async def on_startup():
            logger.info("Ensuring users table and unique key…")
            await init_models(engine)
            logger.info("Application ready to accept requests.")

        @app.on_event("shutdown")
        async def on_shutdown():
            await engine.dispose()

    return app


if __name__ == "__main__":
    uvicorn.run(
        "main:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
