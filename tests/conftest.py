"""Test fixtures — an isolated in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own aiosqlite engine on an in-memory database.
   StaticPool hands every session the same single connection, otherwise
   each new connection would see a blank in-memory schema.
2. The schema is created on that engine before the test and the engine is
   disposed after it, so no data leaks between tests.
3. The app's get_db dependency is overridden to open sessions on the test
   engine; everything else (including the real auth gate) runs unchanged.

The env vars must be set before any smarttodo import: settings are read
once at import time.
"""

import os

os.environ.setdefault("SMARTTODO_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SMARTTODO_BCRYPT_ROUNDS", "4")
os.environ.setdefault("SMARTTODO_JWT_SECRET", "test-secret-that-is-at-least-32-bytes-long")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from smarttodo.db.engine import get_db
from smarttodo.db.models import Base
from smarttodo.main import app


@pytest_asyncio.fixture()
async def session_factory():
    """Fresh in-memory schema, torn down after the test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A session for tests that drive the store/service layer directly."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client against the app, with get_db pointed at the test engine.

    Learn: Auth is NOT mocked. Tests register and log in through the API
    and send real bearer tokens, so every protected call exercises the
    full gate (header parsing → JWT verify → user lookup).
    """
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def register_and_login(client: AsyncClient, username: str, password: str = "pw123") -> dict:
    """Register + login through the API. Returns auth headers."""
    r = await client.post(
        "/api/auth/register", json={"username": username, "password": password}
    )
    assert r.status_code == 201, r.text
    r = await client.post(
        "/api/auth/login", json={"username": username, "password": password}
    )
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['data']['token']}"}


@pytest_asyncio.fixture()
async def ann(client):
    """Auth headers for user 'ann'."""
    return await register_and_login(client, "ann")


@pytest_asyncio.fixture()
async def bob(client):
    """Auth headers for user 'bob'."""
    return await register_and_login(client, "bob")
