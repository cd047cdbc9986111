# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Database session management for the ORD Service.

The catalog is read-only: sessions are never committed, only closed.
"""

from typing import AsyncGenerator

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import get_settings

logger = structlog.get_logger(__name__)

# Lazy initialization of engine and session factory so importing the app
# never opens a connection.
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _mask_url(database_url: str) -> str:
    """Hide the password part of a database URL for logging."""
    if "@" not in database_url:
        return database_url
    credentials, host = database_url.rsplit("@", 1)
    if ":" in credentials.split("//", 1)[-1]:
        credentials = credentials.rsplit(":", 1)[0] + ":***"
    return f"{credentials}@{host}"


def get_engine() -> AsyncEngine:
    """Lazily create the async engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        logger.info("database_engine_created", url=_mask_url(settings.database_url))
        _engine = create_async_engine(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
            echo=settings.debug,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Lazily create the session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database sessions."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


async def check_database() -> bool:
    """Return True when the database answers a trivial query."""
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning("database_check_failed", error=str(e))
        return False


async def close_db() -> None:
    """Close database connections."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("database_connection_closed")
