"""Async SQLAlchemy engine and sessions for the documents database."""

from collections.abc import AsyncGenerator
from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from documents_view.core.config import settings
from documents_view.utils.logging import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base of the documents, lookup and mapping tables."""


engine = create_async_engine(
    settings.database_url,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
    pool_recycle=settings.database_pool_recycle,
    pool_pre_ping=True,
    echo=settings.database_echo,
)

# Services read relationships after commit, so loaded state must survive it.
async_session_maker = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; services decide when to commit."""
    async with async_session_maker() as session:
        yield session


class DatabaseClient:
    """Startup, shutdown and health probing for the shared engine."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def _ping(self) -> bool:
        async with self.engine.connect() as conn:
            return await conn.scalar(text("SELECT 1")) == 1

    async def connect(self) -> None:
        await self._ping()
        LOGGER.info("Documents database reachable", extra={"url": self.engine.url.render_as_string()})

    async def disconnect(self) -> None:
        await self.engine.dispose()
        LOGGER.info("Documents database pool disposed")

    async def create_tables(self) -> None:
        """Create missing tables for every registered model."""
        import documents_view.database.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        LOGGER.info("Documents schema ready", extra={"tables": sorted(Base.metadata.tables)})

    async def health_check(self) -> Dict[str, Any]:
        try:
            responsive = await self._ping()
        except (SQLAlchemyError, OSError) as e:
            LOGGER.warning("Documents database health probe failed", extra={"error": str(e)})
            return {"status": "unhealthy", "connected": False, "error": str(e)}

        return {
            "status": "healthy" if responsive else "unhealthy",
            "connected": True,
            "pool": self.engine.pool.status(),
        }


db_client = DatabaseClient(engine)


async def init_database(create_tables: bool = True) -> None:
    """Check connectivity and, unless told otherwise, create missing tables."""
    await db_client.connect()
    if create_tables:
        await db_client.create_tables()


async def close_database() -> None:
    await db_client.disconnect()
