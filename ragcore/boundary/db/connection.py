"""
Database connection management.

Provides the async SQLAlchemy engine, session factory and schema
creation for the vector store.

Dependencies: sqlalchemy, ragcore.configs
System role: Database connection lifecycle management
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ragcore.boundary.db.base import Base
from ragcore.configs.database import DatabaseSettings

# Register ORM models on Base.metadata
from ragcore.boundary.db import models  # noqa: F401

logger = logging.getLogger(__name__)


def get_async_engine(db_config: DatabaseSettings) -> AsyncEngine:
    """
    Create async SQLAlchemy engine with connection pooling.

    pool_pre_ping=True verifies connections before use to detect
    stale/broken connections early. SQLite URLs skip pool sizing; an
    in-memory SQLite database shares one connection through StaticPool
    so every session sees the same data.

    Args:
        db_config: Database settings

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Usage:
        engine = get_async_engine(settings.database)
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    if db_config.is_sqlite:
        if ":memory:" in db_config.url or db_config.url.rstrip("/").endswith("sqlite+aiosqlite:"):
            return create_async_engine(
                db_config.url,
                echo=db_config.echo_sql,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        return create_async_engine(db_config.url, echo=db_config.echo_sql, pool_pre_ping=True)

    return create_async_engine(
        db_config.url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


def get_async_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create async session factory for database operations.

    autoflush=False and expire_on_commit=False keep transaction control
    explicit and let ORM rows be read after commit.

    Args:
        engine: Async engine to bind sessions to

    Returns:
        async_sessionmaker: Async session factory

    Usage:
        SessionFactory = get_async_session_factory(engine)
        async with SessionFactory() as session, session.begin():
            ...
    """
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


def shares_one_connection(engine: AsyncEngine | None) -> bool:
    """True when every session of the engine runs on the same DBAPI connection."""
    return engine is not None and isinstance(engine.pool, StaticPool)


async def init_schema(engine: AsyncEngine) -> None:
    """
    Create all vector store tables that do not exist yet.

    Args:
        engine: Async engine to create tables on
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"{__name__}:init_schema - Tables ready: {sorted(Base.metadata.tables)}")
