"""
Database configuration - SQLAlchemy 2.0 Async
Project: Auto Shop Manager

Defines the engine, the session factory and the FastAPI session dependency.
"""

import logging
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from autoshop.core.config import settings

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# Async engine
# ------------------------------------------------------------
engine_options: Dict[str, Any] = {
    "echo": settings.debug,
    "pool_pre_ping": True,
}
# SQLite pools do not accept sizing arguments
if not settings.database_url.startswith("sqlite"):
    engine_options["pool_size"] = settings.db_pool_size
    engine_options["max_overflow"] = settings.db_max_overflow

engine: AsyncEngine = create_async_engine(settings.database_url, **engine_options)


# ------------------------------------------------------------
# Session factory
# ------------------------------------------------------------
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one session per request.

    Services only flush; the route handler commits once at the end, so a
    request is a single transaction. Any exception rolls it back.

    Yields:
        AsyncSession: async database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """
    Checks database connectivity at startup.

    When DB_CREATE_TABLES is set, missing tables are created as well.
    """
    # Register every mapper on Base.metadata
    from autoshop.models import Base

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if settings.db_create_tables:
                await conn.run_sync(Base.metadata.create_all)
                logger.info("Database tables created")
        logger.info("Database connection established")
    except Exception as e:
        logger.error("Database connection error: %s", e)
        raise


async def close_db() -> None:
    """Disposes the engine connection pool on shutdown."""
    await engine.dispose()
    logger.info("Database connections closed")
