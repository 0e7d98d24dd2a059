"""Test fixtures — a fresh in-memory SQLite store per test.

Learn: Each test gets its own engine on an in-memory SQLite database
(StaticPool keeps the single connection alive across sessions), tables
created from the models, and an app whose get_db dependency hands out
sessions bound to it. No shared state survives between tests.

Auth is NOT mocked: tests register and log in through the API and send
real bearer tokens, so the authentication and ownership gates run for
every protected request.
"""

import uuid
from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from smarttodo.auth.jwt import CredentialKey
from smarttodo.config import Settings
from smarttodo.db.engine import get_db
from smarttodo.db.models import Base
from smarttodo.main import create_app

TEST_SECRET = "test-secret-3f9a1c7e5b2d4f6a8c0e1b3d5f7a9c1e"


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret=TEST_SECRET,
        jwt_expire="1h",
        environment="test",
        bcrypt_rounds=4,
    )


@pytest.fixture
def credential_key():
    return CredentialKey(secret=TEST_SECRET, algorithm="HS256", lifetime=timedelta(hours=1))


@pytest_asyncio.fixture()
async def session_factory():
    """Session factory over a private in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest.fixture
def app(test_settings, session_factory):
    app = create_app(test_settings)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register_user(client):
    """Register an account through the API; returns (token, user)."""

    async def _register(name: str = "Test User", email: str = None, password: str = "password_123"):
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post(
            "/api/v1/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert r.status_code == 201, r.text
        body = r.json()
        return body["token"], body["user"]

    return _register


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
