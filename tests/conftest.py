"""Test fixtures: a fresh in-memory SQLite database per test.

Pattern:
1. Each test gets its own engine on "sqlite+aiosqlite://" with a
   StaticPool, so every session in the test sees the same in-memory DB.
2. Tables are created from Base.metadata (foreign keys switched on, so
   ON DELETE CASCADE behaves like it does in production).
3. The app's get_db is overridden to hand out a new session per
   request from that engine, just like the real dependency.

Env vars are set before tasktrack is imported: fast bcrypt rounds and
a throwaway database URL for the module-level engine.
"""

import os

os.environ.setdefault("TASKTRACK_ENVIRONMENT", "test")
os.environ.setdefault("TASKTRACK_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("TASKTRACK_BCRYPT_ROUNDS", "4")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tasktrack.db.engine import enable_sqlite_foreign_keys, get_db  # noqa: E402
from tasktrack.db.models import Base  # noqa: E402
from tasktrack.main import app  # noqa: E402


@pytest_asyncio.fixture()
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A single session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client running the real auth pipeline against the test DB.

    Only get_db is overridden; tokens are issued and verified for real,
    so tests register users and send their Bearer tokens.
    """
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _register(client, email: str, password: str = "secret1", name: str = "User") -> dict:
    """Register through the API; returns the {user, token} body plus headers."""
    r = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "name": name},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    body["headers"] = {"Authorization": f"Bearer {body['token']}"}
    return body


@pytest_asyncio.fixture()
async def alice(client):
    return await _register(client, "alice@example.com", name="Alice")


@pytest_asyncio.fixture()
async def bob(client):
    return await _register(client, "bob@example.com", name="Bob")


@pytest_asyncio.fixture()
async def register_user(client):
    """Call as ``await register_user(email, password=..., name=...)``."""
    async def _call(email: str, password: str = "secret1", name: str = "User") -> dict:
        return await _register(client, email, password=password, name=name)
    return _call
