"""Database configuration and async session management."""

from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from .config import settings
from .query_hooks import register_query_timing


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine with the query timing hooks attached.

    Args:
        database_url: SQLAlchemy async database URL
        echo: Whether to echo SQL statements

    Returns:
        AsyncEngine: Configured engine
    """
    options: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    # Use StaticPool for SQLite in-memory databases (tests and the seed script)
    if "sqlite" in database_url:
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    elif "asyncpg" in database_url:
        # Month extraction for monthly plans runs in the session time zone
        options["connect_args"] = {"server_settings": {"timezone": "UTC"}}

    async_engine = create_async_engine(database_url, **options)
    register_query_timing(async_engine)
    return async_engine


def build_session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine."""
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Create async engine
engine = build_engine(settings.resolved_database_url, echo=settings.debug)

# Create async session factory
async_session_factory = build_session_factory(engine)

# Create declarative base for models
Base = declarative_base()


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function that yields database sessions.

    Yields:
        AsyncSession: Database session
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# Alias for FastAPI dependency injection
get_db = get_async_session


async def init_db(async_engine: AsyncEngine | None = None) -> None:
    """Initialize the database by creating all tables."""
    async with (async_engine or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
