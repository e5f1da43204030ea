"""Database engine and session management."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tiksnap.models.schema import Base
from tiksnap.utils.config import DB_URL
from tiksnap.utils.logging import get_logger

logger = get_logger(__name__)


# Synchronous engine for initial setup
sync_engine = create_engine(
    DB_URL,
    echo=False,
    connect_args={"check_same_thread": False},  # Required for SQLite
)

# SQLite async requires aiosqlite
async_db_url = DB_URL.replace("sqlite://", "sqlite+aiosqlite://")
async_engine = create_async_engine(
    async_db_url,
    echo=False,
    connect_args={"check_same_thread": False},
)

AsyncSessionLocal = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


def init_db() -> None:
    """
    Create all tables.
    Call once before recording or reading fetch history.
    """
    logger.info(f"Initializing database at: {DB_URL}")
    Base.metadata.create_all(bind=sync_engine)


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get an async database session as a context manager.

    Commits on success and rolls back on error.

    Usage:
        async with get_async_session() as session:
            await FetchHistoryRepository.get_recent(session)

    Yields:
        SQLAlchemy AsyncSession instance
    """
    session = AsyncSessionLocal()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def close_db() -> None:
    """Clean up database connections."""
    await async_engine.dispose()
    logger.info("Database connections closed")
