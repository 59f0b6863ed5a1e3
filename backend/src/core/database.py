"""
Async Database Configuration
Engine and session factory for the applications store (SQLAlchemy 2.0 async)
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from loguru import logger

from .config import settings


# Base class for ORM models
Base = declarative_base()


def engine_options(database_url: str, debug: bool = False) -> Dict[str, Any]:
    """
    Engine keyword arguments for a database URL.

    SQLite (tests, local runs) and debug mode get no pool; the server
    database gets the pool sizes from settings.
    """
    options: Dict[str, Any] = {"echo": debug}
    if debug or database_url.startswith("sqlite"):
        options["poolclass"] = NullPool
        return options

    options.update({
        "pool_pre_ping": True,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
    })
    return options


def build_engine(database_url: Optional[str] = None, debug: Optional[bool] = None) -> AsyncEngine:
    url = database_url or settings.DATABASE_URL
    return create_async_engine(url, **engine_options(url, settings.DEBUG if debug is None else debug))


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    """Session factory handed to repositories (one session per operation)"""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine: AsyncEngine = build_engine()
AsyncSessionLocal = build_session_factory(engine)


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Session that commits on success and rolls back on error

    Usage:
        async with get_db_session() as session:
            result = await session.execute(query)
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """Create the applications and timeline tables if missing"""
    # Register ORM models on Base.metadata
    import infrastructure.persistence.models  # noqa: F401

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


async def close_db() -> None:
    await engine.dispose()


async def health_check() -> bool:
    """True when the database answers a trivial query"""
    try:
        async with get_db_session() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return False
