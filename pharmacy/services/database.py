"""Async database engine lifecycle and per-request sessions."""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool

from pharmacy.models.base import Base

logger = structlog.get_logger(__name__)


def to_async_url(database_url: str) -> str:
    """Point plain ``postgresql://`` URLs at the asyncpg driver."""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url


class DatabaseManager:
    """Owns the async engine and session factory for one database URL.

    Used by the API (through :func:`get_db_session`) and by the CLI, which
    creates a short-lived manager per command.
    """

    def __init__(self, database_url: str, pool_size: int = 20, max_overflow: int = 10):
        """Initialize database manager.

        Args:
            database_url: Connection string (postgresql://, postgresql+asyncpg:// or sqlite+aiosqlite://)
            pool_size: Size of the connection pool
            max_overflow: Max connections beyond pool_size
        """
        self.database_url = database_url
        self.pool_size = pool_size
        self.max_overflow = max_overflow

        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def dialect(self) -> str:
        """Backend name from the URL scheme (``postgresql``, ``sqlite``)."""
        return self.database_url.split(":", 1)[0].split("+", 1)[0]

    async def initialize_async(self) -> None:
        """Create the engine and session factory (idempotent)."""
        if self._engine is not None:
            return

        url = to_async_url(self.database_url)

        # NullPool doesn't support pool_size/max_overflow
        if url.startswith("sqlite") and ":memory:" in url:
            self._engine = create_async_engine(url, poolclass=NullPool, echo=False)
        else:
            self._engine = create_async_engine(
                url,
                poolclass=AsyncAdaptedQueuePool,
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_pre_ping=True,
                echo=False,
            )

        if self.dialect == "postgresql":

            @event.listens_for(self._engine.sync_engine, "connect")
            def pin_utc(dbapi_conn, connection_record):
                cursor = dbapi_conn.cursor()
                cursor.execute("SET timezone='UTC'")
                cursor.close()

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info("database_initialized", driver=self._engine.dialect.driver)

    @asynccontextmanager
    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session scope that commits on a clean exit and rolls back on error.

        Example:
            async with db_manager.get_async_session() as session:
                result = await session.execute(select(MedicationDB))
        """
        if self._session_factory is None:
            raise RuntimeError("Async database not initialized. Call initialize_async() first.")

        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self) -> None:
        """Create missing tables (development databases; production uses Alembic)."""
        await self.initialize_async()

        # Registers every table with Base.metadata
        import pharmacy.models  # noqa: F401

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        try:
            await self.initialize_async()
            async with self.get_async_session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as exc:
            logger.warning("database_health_check_failed", error=str(exc))
            return False

    async def close(self) -> None:
        """Dispose of the connection pool."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None


# Global database manager instance (initialized in application startup)
_db_manager: DatabaseManager | None = None


def initialize_database(database_url: str | None = None) -> DatabaseManager:
    """Initialize global database manager.

    Args:
        database_url: Database connection string (defaults to DATABASE_URL env var)
    """
    global _db_manager

    if database_url is None:
        database_url = os.getenv("DATABASE_URL")
        if database_url is None:
            raise ValueError("DATABASE_URL environment variable not set")

    _db_manager = DatabaseManager(database_url)
    return _db_manager


def get_db_manager() -> DatabaseManager | None:
    """Return the global database manager, if one was initialized."""
    return _db_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting database session.

    Example:
        @router.get("/medications")
        async def list_medications(db: AsyncSession = Depends(get_db_session)):
            result = await db.execute(select(MedicationDB))
            return result.scalars().all()
    """
    if _db_manager is None:
        raise RuntimeError("Database not initialized. Call initialize_database() first.")

    async with _db_manager.get_async_session() as session:
        yield session


async def shutdown_database() -> None:
    """Shutdown database connections (call on application shutdown)."""
    global _db_manager
    if _db_manager is not None:
        await _db_manager.close()
        _db_manager = None
