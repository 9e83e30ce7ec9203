import os

from jose import jwt

# Settings are read at import time; point them at a throwaway store first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SUPABASE_URL"] = "https://agenda-test.supabase.co"
os.environ["SUPABASE_KEY"] = jwt.encode({"role": "service_role"}, "test-secret", algorithm="HS256")

from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agenda.console import Console, RecordsAPI
from agenda.database import enable_sqlite_foreign_keys, get_db
from agenda.main import app
from agenda.schema.provisioning import provision_schema

# Every test gets its own in-memory SQLite store, provisioned the same way as
# production. StaticPool keeps one connection so the memory database survives
# between sessions.


@pytest_asyncio.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """A bare store with no tables."""
    test_engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool, echo=False)
    enable_sqlite_foreign_keys(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(engine: AsyncEngine):
    await provision_schema(engine)
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def override_db(session_factory):
    """Route the app's ``get_db`` dependency to the test store, one session per request."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def async_client(override_db) -> AsyncGenerator[AsyncClient, None]:
    """Client for testing API endpoints."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def console(override_db) -> AsyncGenerator[Console, None]:
    """Client application wired to the in-process API."""
    async with RecordsAPI(base_url="http://test/api", transport=ASGITransport(app=app)) as api:
        yield Console(api)
