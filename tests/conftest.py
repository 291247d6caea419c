"""
Shared fixtures — a fresh SQLite file database per test and an HTTP
client wired to an app built around it.
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient

# module-level config must never pick up a real secret or database
os.environ.setdefault("JWT_SECRET", "thisisalongsecretjustfortests")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")

from auth.jwt import TokenService
from auth.password import CredentialHasher
from auth.store import UserStore
from config.settings import Settings
from database.session import build_engine, build_session_factory, init_models
from main import create_app

TEST_SECRET = "thisisalongsecretjustfortests"


@pytest.fixture
def settings():
    return Settings(
        jwt_secret=TEST_SECRET,
        jwt_expiry_seconds=3600,
        bcrypt_rounds=4,
        database_url="sqlite+aiosqlite:///:memory:",
    )


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def store(session_factory):
    return UserStore(session_factory)


@pytest.fixture
def hasher():
    return CredentialHasher(rounds=4)


@pytest.fixture
def tokens():
    return TokenService(TEST_SECRET, expires_in=3600)


@pytest.fixture
async def client(settings, session_factory):
    app = create_app(settings, session_factory=session_factory)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as ac:
        yield ac
