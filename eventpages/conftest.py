from contextlib import asynccontextmanager

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from eventpages.auth.dependencies import get_auth_backend
from eventpages.auth.tests.inmemory_backend import InMemoryAuthBackend
from eventpages.events.dependencies import get_in_flight_guard, get_store_client
from eventpages.events.lifecycle import InFlightGuard
from eventpages.main import app
from eventpages.models import BaseModel
from eventpages.store.tests.inmemory_store import InMemoryStoreClient

# Test database: in-memory SQLite shared by every connection of the engine
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@asynccontextmanager
async def fresh_schema_session(foreign_keys: bool = False):
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    if foreign_keys:
        # SQLite only enforces REFERENCES clauses when asked to, Postgres always does
        event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture
async def db_session():
    """An isolated database session on a freshly created schema."""
    async with fresh_schema_session() as session:
        yield session


@pytest_asyncio.fixture
async def fk_db_session():
    """Like db_session, with foreign keys and their ON DELETE rules enforced."""
    async with fresh_schema_session(foreign_keys=True) as session:
        yield session


@pytest.fixture
def store():
    return InMemoryStoreClient()


@pytest.fixture
def auth_backend():
    return InMemoryAuthBackend()


@pytest.fixture
def owner(auth_backend):
    return auth_backend.add_user("owner@example.com", "secret-password")


@pytest.fixture
def owner_headers(auth_backend, owner):
    session = auth_backend.issue(owner)
    return {"Authorization": f"Bearer {session.access_token}"}


@pytest.fixture
def app_overrides(store, auth_backend):
    """Dependency overrides wiring the app to the in-memory store and auth backend."""
    guard = InFlightGuard()
    return {
        get_store_client: lambda: store,
        get_auth_backend: lambda: auth_backend,
        get_in_flight_guard: lambda: guard,
    }


@pytest.fixture
def client_factory():
    @asynccontextmanager
    async def factory(overrides=None):
        app.dependency_overrides.update(overrides or {})
        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client
        finally:
            app.dependency_overrides.clear()

    return factory


@pytest_asyncio.fixture
async def client(client_factory, app_overrides):
    async with client_factory(app_overrides) as ac:
        yield ac
