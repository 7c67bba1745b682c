"""Database connection and transaction management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from movilidad.models import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from movilidad.config import Settings


class LedgerStore:
    """Explicit handle on the relational store backing the ledger.

    One instance is created by whoever owns the process (API lifespan, CLI
    command, test fixture) and passed to the services that need it. Each
    call to ``transaction()`` checks a connection out of the pool and
    returns it when the block exits, whatever the outcome.

    SQLite transactions begin with ``BEGIN IMMEDIATE`` so the write lock is
    taken before the first read; PostgreSQL relies on per-worker advisory
    locks (see ``acquire_worker_lock``).
    """

    def __init__(
        self,
        database_url: str,
        *,
        echo: bool = False,
        lock_timeout_seconds: float = 5.0,
    ):
        self.database_url = database_url
        self.lock_timeout_seconds = lock_timeout_seconds
        self.engine: AsyncEngine = self._create_engine(database_url, echo)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> LedgerStore:
        """Build a store from application settings."""
        return cls(
            settings.database_url,
            echo=settings.debug,
            lock_timeout_seconds=settings.lock_timeout_seconds,
        )

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def _create_engine(self, database_url: str, echo: bool) -> AsyncEngine:
        if database_url.startswith("sqlite"):
            return self._create_sqlite_engine(database_url, echo)
        return create_async_engine(
            database_url,
            echo=echo,
            pool_pre_ping=True,
            pool_size=10,
            max_overflow=20,
        )

    def _create_sqlite_engine(self, database_url: str, echo: bool) -> AsyncEngine:
        kwargs: dict[str, Any] = {
            "echo": echo,
            "connect_args": {"timeout": self.lock_timeout_seconds},
        }
        if ":memory:" in database_url or database_url.endswith("://"):
            # A memory database only exists on one connection
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"]["check_same_thread"] = False

        engine = create_async_engine(database_url, **kwargs)

        @event.listens_for(engine.sync_engine, "connect")
        def _on_connect(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
            # Hand transaction control to the "begin" hook below
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.close()

        @event.listens_for(engine.sync_engine, "begin")
        def _on_begin(conn):  # type: ignore[no-untyped-def]
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        return engine

    async def create_schema(self) -> None:
        """Create all ledger and directory tables if missing."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_schema(self) -> None:
        """Drop all tables. Test and tooling use only."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Run a block inside one database transaction.

        Commits when the block completes, rolls back on any exception.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> bool:
        """Return True when the store answers a trivial query."""
        async with self.session_factory() as session:
            await session.execute(text("SELECT 1"))
        return True


async def acquire_worker_lock(
    session: AsyncSession,
    worker_id: str,
    lock_timeout_seconds: float | None = None,
) -> None:
    """Serialize ledger writes for one worker until the transaction ends.

    On PostgreSQL this takes a transaction-scoped advisory lock keyed by the
    worker id; unrelated workers never wait on each other. On SQLite the
    transaction already holds the database write lock (BEGIN IMMEDIATE).
    """
    bind = session.get_bind()
    if bind.dialect.name != "postgresql":
        return

    if lock_timeout_seconds is not None:
        await session.execute(
            text("SELECT set_config('lock_timeout', :timeout, true)"),
            {"timeout": f"{int(lock_timeout_seconds * 1000)}ms"},
        )
    await session.execute(
        text("SELECT pg_advisory_xact_lock(hashtext(:worker_id))"),
        {"worker_id": worker_id},
    )
