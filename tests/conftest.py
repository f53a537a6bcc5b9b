"""Shared pytest fixtures and configuration.

This module provides common fixtures used across all test types.
"""

import os
import tempfile
from collections.abc import AsyncGenerator

# Cheap hashes and a fixed signing key for every test
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

# Import models to register them with Base.metadata
import pharmacy.models  # noqa: F401
from pharmacy.api.main import app
from pharmacy.api.middleware.auth import auth_middleware
from pharmacy.api.middleware.rate_limiter import auth_rate_limiter
from pharmacy.models.base import Base
from pharmacy.models.catalog import MedicationCreate, MedicationDB
from pharmacy.models.user import UserCreate, UserDB, UserRole
from pharmacy.services.catalog import CatalogService
from pharmacy.services.database import get_db_session
from pharmacy.services.users import UserRepository

DEFAULT_PASSWORD = "Password123!"


@pytest.fixture(scope="session")
def test_database_url() -> str:
    """Provide test database URL.

    Uses file-based SQLite for testing to avoid in-memory connection issues,
    or PostgreSQL if configured.
    """
    db_url = os.getenv("TEST_DATABASE_URL")
    if db_url:
        return db_url

    temp_dir = tempfile.gettempdir()
    return f"sqlite+aiosqlite:///{temp_dir}/test_pharmacy.db"


@pytest.fixture(scope="function")
async def db_engine(test_database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Engine with a freshly created schema, dropped after the test."""
    engine = create_async_engine(test_database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def async_db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session for testing."""
    async with session_factory() as session:
        yield session


@pytest.fixture(scope="function")
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, with one test database session per request."""

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Every test starts with full login/register buckets."""
    auth_rate_limiter.reset()
    yield
    auth_rate_limiter.reset()


# ========== Data helpers ==========


async def _create_user(
    session: AsyncSession,
    username: str = "patient",
    role: UserRole = UserRole.USER,
    profile_completed: bool = True,
    **fields,
) -> UserDB:
    user = await UserRepository(session).create_user(
        UserCreate(
            username=username,
            email=fields.pop("email", f"{username}@example.com"),
            password=DEFAULT_PASSWORD,
            role=role,
            **fields,
        )
    )
    if profile_completed:
        user.profile_completed = True
        await session.commit()
        await session.refresh(user)
    return user


@pytest.fixture
def make_user(async_db_session: AsyncSession):
    """Factory persisting a user whose password is DEFAULT_PASSWORD."""

    async def factory(username: str = "patient", **kwargs) -> UserDB:
        return await _create_user(async_db_session, username, **kwargs)

    return factory


@pytest.fixture
def make_medication(async_db_session: AsyncSession):
    """Factory adding a catalog medication (over the counter unless told otherwise)."""

    async def factory(name: str = "Lisinopril", **fields) -> MedicationDB:
        values = {"price": 9.99, "requires_prescription": False, "category": "Heart Health"}
        values.update(fields)
        return await CatalogService(async_db_session).create_medication(
            MedicationCreate(name=name, **values)
        )

    return factory


@pytest.fixture
def auth_headers():
    """Build a bearer Authorization header for a stored user."""

    def build(user: UserDB) -> dict[str, str]:
        token = auth_middleware.token_validator.issue_token(user.id, user.role)
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
async def patient(make_user) -> UserDB:
    return await make_user("patient", first_name="Pat", last_name="Jones")


@pytest.fixture
async def admin(make_user) -> UserDB:
    return await make_user("pharmacist", role=UserRole.ADMIN)
