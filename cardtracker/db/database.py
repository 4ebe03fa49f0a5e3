"""
Engine and per-request sessions for the card tracker database.

SQLite (aiosqlite) is the default store; PostgreSQL (asyncpg) gets a
sized connection pool from settings.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardtracker.config import Settings, settings
from cardtracker.models.db import Base

logger = logging.getLogger(__name__)


def engine_options(config: Settings) -> dict[str, Any]:
    """
    Keyword arguments for create_async_engine.

    Pool sizing only applies to server databases; SQLite instead gets a
    busy timeout so concurrent writers wait rather than fail.
    """
    options: dict[str, Any] = {"echo": config.debug, "pool_pre_ping": True}
    if make_url(config.database_url).get_backend_name() == "sqlite":
        options["connect_args"] = {"timeout": config.db_busy_timeout_seconds}
        return options

    options.update(
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_recycle=config.db_pool_recycle_seconds,
    )
    return options


engine = create_async_engine(settings.database_url, **engine_options(settings))

# Rows stay readable after commit; response mapping happens after the handler returns
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    One session, and one transaction, per request: it commits after the
    handler returns. Any exception escaping the handler (including the
    classified KnownError family) leaves the transaction uncommitted,
    so a rejected request never persists a partial change.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create the card tracker tables if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database ready at %s", make_url(settings.database_url).render_as_string())
