"""
Database connection management for the SQL record store using SQLAlchemy async.

This module provides engine creation and table setup for deployments that
mirror the postjournal tables into their own PostgreSQL database instead of
talking to Supabase directly.
"""
import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import declarative_base

from config.settings import settings

logger = logging.getLogger(__name__)

# Base class for SQLAlchemy models
Base = declarative_base()

_engine: Optional[AsyncEngine] = None


def create_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> AsyncEngine:
    """
    Create an async engine.

    Args:
        database_url: SQLAlchemy URL; defaults to DATABASE_URL with the asyncpg driver
        echo: Log SQL statements; defaults to DATABASE_ECHO

    Returns:
        AsyncEngine
    """
    url = database_url or settings.get_database_url(async_driver=True)
    echo = settings.database.echo if echo is None else echo

    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)

    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        pool_recycle=3600,
    )


def get_engine() -> AsyncEngine:
    """Process-wide engine, created on first use."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


async def init_db(engine: Optional[AsyncEngine] = None) -> None:
    """
    Create all tables.

    This should be called once when setting up a local mirror.
    """
    engine = engine or get_engine()
    async with engine.begin() as conn:
        # Import models so they're registered on Base
        from innsyn.database import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")


async def close_db() -> None:
    """Dispose the process-wide engine."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        logger.info("Database connections closed")


async def test_connection(engine: Optional[AsyncEngine] = None) -> bool:
    """
    Test database connection.

    Returns:
        bool: True if connection successful, False otherwise.
    """
    engine = engine or get_engine()
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection test successful")
        return True
    except Exception as e:
        logger.error(f"Database connection test failed: {e}")
        return False
