"""
paperdesk/database.py
Async database configuration and the per-use-case transaction boundary
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
)

from paperdesk.config.settings import settings
from paperdesk.errors import APIError, storage_error_from
from paperdesk.orm.base import Base
import paperdesk.orm  # registers all models

logger = logging.getLogger(__name__)


def build_engine(database_url: str = settings.DATABASE_URL) -> AsyncEngine:
    """Create an async engine with pool settings suited to the dialect."""
    if "sqlite" in database_url.lower():
        # SQLite: busy timeout lets concurrent writers queue instead of failing
        return create_async_engine(
            database_url,
            echo=False,
            pool_pre_ping=True,
            connect_args={
                "timeout": float(settings.DB_TIMEOUT_SECONDS),
            }
        )
    return create_async_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_TIMEOUT_SECONDS,
        pool_recycle=3600,
    )


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine()
AsyncSessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dependency for getting async database session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def atomic(db: AsyncSession, context: str = "operation") -> AsyncIterator[AsyncSession]:
    """
    One logical unit of work.

    Commits when the block completes; rolls back on any error so that no part
    of a multi-record use case becomes observable on failure. Driver and
    connection failures surface as StorageError.
    """
    try:
        yield db
        await db.commit()
    except APIError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        raise storage_error_from(e, context) from e
    except BaseException:
        await db.rollback()
        raise


async def create_all(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db() -> None:
    """Create any missing tables."""
    logger.info("Initializing database...")
    logger.info(f"Database dialect: {engine.url.get_backend_name()}")
    try:
        await create_all(engine)
        logger.info("✓ Database initialization complete")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise


async def close_db() -> None:
    """Close database connection"""
    await engine.dispose()
    logger.info("Database connection closed")
