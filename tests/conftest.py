"""
Shared test fixtures.

Every test gets a fresh in-memory SQLite database and a throwaway
upload directory. The HTTP client talks to the ASGI app directly and
skips the lifespan, so neither ``init_models`` nor the scheduler runs.
"""

import os

os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("DB_TYPE", "sqlite")
os.environ.setdefault("SQLITE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("STORAGE_BACKEND", "local")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import Base, get_db, enable_sqlite_foreign_keys
from app.core.storage import LocalStorage, set_storage
from app.models.enums.user_role import UserRole

from tests.factories import make_user


# ===================
# DATABASE
# ===================

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def storage(tmp_path):
    backend = LocalStorage(str(tmp_path / "uploads"))
    set_storage(backend)
    yield backend
    set_storage(None)


# ===================
# USERS
# ===================

@pytest.fixture
async def admin(db):
    return await make_user(db, "admin@example.com", UserRole.admin, name="Ada Admin")


@pytest.fixture
async def customer(db):
    return await make_user(
        db, "buyer@acme-corp.com", UserRole.customer, name="Casey Buyer", company_name="Acme Corp"
    )


@pytest.fixture
async def other_customer(db):
    return await make_user(db, "someone@globex.com", UserRole.customer, company_name="Globex")


# ===================
# HTTP CLIENT
# ===================

@pytest.fixture
async def client(session_factory):
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
