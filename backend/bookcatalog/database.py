"""
Book Catalog Backend — Database Session Management
==================================================

What:  Async SQLAlchemy engine construction, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   The application lifespan builds one engine per process and stores it,
       together with its session factory, on `app.state`. Route handlers get
       a session through the `get_db_session` dependency, which reads the
       factory from the request's app. Nothing here creates an engine at
       import time.

Connection Pooling Strategy:
    pool_size / max_overflow: fixed values from configuration
    pool_pre_ping:            validates connections before use
    pool_recycle:             recycles long-lived connections
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from bookcatalog.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations.
    """
    pass


# ── Engine / Session Factory ──────────────────────────────────────────────
def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Build the process-wide async engine.

    Called once by the application lifespan. The engine owns the connection
    pool; it does not open a connection until the first query.
    """
    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=settings.db_pool_recycle,
        # SQL echo only when debugging
        echo=settings.log_level == "DEBUG",
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False keeps ORM attributes readable after commit, which
    the response mapping relies on.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory on `request.app.state`
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/categories")
        async def list_categories(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine(engine: AsyncEngine) -> None:
    """
    Gracefully closes all connections in the pool.

    Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
