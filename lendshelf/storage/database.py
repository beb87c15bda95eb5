"""
Connection pool for LendShelf.

One AsyncEngine per process. Connections are opened lazily on first use
and the engine enforces the pool ceiling; repositories only ever borrow a
session for the duration of a single transaction.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from loguru import logger
from sqlalchemy import event, insert, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from lendshelf.errors import PersistenceError
from .models import Base, RoleModel
from .records import Role


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(
    database_url: str,
    pool_size: Optional[int] = None,
    echo: bool = False,
) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    Args:
        database_url: SQLAlchemy URL (postgresql+asyncpg or sqlite+aiosqlite)
        pool_size: Maximum pooled connections (ignored for SQLite)
        echo: Log emitted SQL

    Returns:
        AsyncEngine; no connection is made until first use.
    """
    is_sqlite = database_url.startswith("sqlite")
    kwargs = {"echo": echo}

    if is_sqlite:
        if ":memory:" in database_url or database_url == "sqlite+aiosqlite://":
            # A single shared connection, otherwise each checkout sees an empty database
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_pre_ping"] = True
        if pool_size:
            kwargs["pool_size"] = pool_size
            kwargs["max_overflow"] = 0

    engine = create_async_engine(database_url, **kwargs)

    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    return engine


class ConnectionPool:
    """
    Shared access to the database.

    Usage:
        pool = ConnectionPool(create_engine("sqlite+aiosqlite:///:memory:"))

        async with pool.begin("create book") as session:
            await session.execute(stmt)
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def begin(self, action: str) -> AsyncIterator[AsyncSession]:
        """
        Run a block inside one transaction.

        Commits when the block exits cleanly and rolls back otherwise.
        Database failures are re-raised as PersistenceError; any other
        exception (e.g. EntityNotFound) propagates unchanged.

        Args:
            action: Short description used in logs and error messages
        """
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as e:
            logger.opt(exception=e).error(f"Database error while trying to {action}")
            raise PersistenceError(f"Failed to {action}") from e

    async def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()


def connect_database_with(settings) -> ConnectionPool:
    """Build the pool from application settings."""
    engine = create_engine(
        settings.database_url,
        pool_size=settings.database_pool_size,
        echo=settings.database_echo,
    )
    logger.info(f"Connection pool configured for {engine.url.render_as_string(hide_password=True)}")
    return ConnectionPool(engine)


async def create_tables(pool: ConnectionPool) -> None:
    """Create database tables."""
    async with pool.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_roles(pool: ConnectionPool) -> None:
    """Insert the Admin and User roles if they do not exist yet."""
    async with pool.begin("seed roles") as session:
        existing = set((await session.execute(select(RoleModel.name))).scalars())
        missing = [role.value for role in Role if role.value not in existing]
        if missing:
            await session.execute(insert(RoleModel), [{"name": name} for name in missing])
            logger.info(f"Seeded roles: {', '.join(missing)}")
