"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Engine and session factory are created lazily on first use (get_db /
get_db_transactional) so import does not trigger Settings validation.

Supported drivers: postgresql+asyncpg (production) and sqlite+aiosqlite
(local use and tests). Repositories insert inside SAVEPOINTs so a
unique-constraint conflict does not abort the caller's transaction; for
SQLite the pysqlite transaction emulation is replaced so SAVEPOINT works.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from rbac.core.config import get_settings

logger = logging.getLogger(__name__)

# Set by _ensure_engine() on first use; avoids get_settings() at import time.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


def _enable_sqlite_savepoints(async_engine: AsyncEngine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINT / ROLLBACK TO behave on SQLite."""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _do_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(async_engine.sync_engine, "begin")
    def _do_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


def create_engine_for_url(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine for url with driver-appropriate options.

    In-memory SQLite uses a StaticPool so every session sees the same
    database. Pool sizing from settings applies to Postgres only.
    """
    if url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"echo": echo}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            kwargs["poolclass"] = StaticPool
        async_engine = create_async_engine(url, **kwargs)
        _enable_sqlite_savepoints(async_engine)
        return async_engine

    settings = get_settings()
    pool_size = settings.db_pool_size if settings.db_pool_size is not None else 10
    max_overflow = (
        settings.db_max_overflow if settings.db_max_overflow is not None else 20
    )
    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=3600,
    )


def create_session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by get_db and by tests."""
    return async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def _ensure_engine() -> None:
    """Create engine and AsyncSessionLocal on first use."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    engine = create_engine_for_url(settings.database_url, echo=settings.database_echo)
    AsyncSessionLocal = create_session_factory(engine)
    logger.debug("Database engine created for %s", settings.database_url.split("://", 1)[0])


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the process session factory, creating the engine on first use."""
    _ensure_engine()
    return AsyncSessionLocal


async def init_models(async_engine: AsyncEngine | None = None) -> None:
    """Create role and user_role tables if missing (no migration tooling)."""
    import rbac.infrastructure.persistence.models  # noqa: F401  (register tables)

    if async_engine is None:
        _ensure_engine()
        async_engine = engine
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose the lazily created engine (call at shutdown)."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
    engine = None
    AsyncSessionLocal = None


async def get_db() -> AsyncIterator[AsyncSession]:
    """Session for read operations. Does not commit; use get_db_transactional for writes."""
    _ensure_engine()
    async with AsyncSessionLocal() as session:
        yield session


async def get_db_transactional() -> AsyncIterator[AsyncSession]:
    """Session for write operations.

    Begins a transaction, commits on success, rolls back on exception.
    Each RoleService / AssignmentService call is one check-then-write unit.
    """
    _ensure_engine()
    async with AsyncSessionLocal() as session:
        async with session.begin():
            yield session
