"""Legajos - Pytest Configuration and Fixtures

Provides shared fixtures for all tests including database sessions,
test clients, users per role and their bearer tokens.
"""

import os
import tempfile
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool


# Set test environment before importing app modules
os.environ["LEGAJOS_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["API_JWT_SECRET"] = "test-secret-key-for-testing-only-0123456789"
os.environ["API_BCRYPT_ROUNDS"] = "4"
os.environ["UPLOAD_ROOT"] = tempfile.mkdtemp(prefix="legajos-uploads-")
os.environ["LOG_TO_FILE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from tests.factories import UserFactory  # noqa: E402


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test.

    Uses SQLite in-memory for fast, isolated tests.
    """
    from core.database import Base
    from core.database.session import enable_sqlite_foreign_keys

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
def storage(tmp_path):
    """Upload storage rooted in a per-test directory."""
    from core.storage import MediaStorage, set_storage

    media_storage = MediaStorage(str(tmp_path / "uploads"))
    set_storage(media_storage)
    yield media_storage
    set_storage(None)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, storage) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""
    from api.main import app
    from core.database.session import get_db

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


async def _persist_user(db_session: AsyncSession, **kwargs):
    user = UserFactory.create(**kwargs)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession):
    """Create an admin user in the database."""
    return await _persist_user(db_session, email="admin@example.com", role="ADMIN")


@pytest_asyncio.fixture
async def operator_user(db_session: AsyncSession):
    """Create an operator user in the database."""
    return await _persist_user(db_session, email="operator@example.com", role="OPERATOR")


@pytest_asyncio.fixture
async def consultant_user(db_session: AsyncSession):
    """Create a read-only consultant in the database."""
    return await _persist_user(db_session, email="consultant@example.com", role="CONSULTANT")


@pytest_asyncio.fixture
async def inactive_user(db_session: AsyncSession):
    return await _persist_user(db_session, email="inactive@example.com", role="OPERATOR", is_active=False)


def _headers_for(user) -> dict[str, str]:
    from api.auth import create_user_token

    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture
def admin_headers(admin_user) -> dict[str, str]:
    """Get authorization headers for admin requests."""
    return _headers_for(admin_user)


@pytest.fixture
def operator_headers(operator_user) -> dict[str, str]:
    return _headers_for(operator_user)


@pytest.fixture
def consultant_headers(consultant_user) -> dict[str, str]:
    return _headers_for(consultant_user)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
