"""Async engine and session bootstrap for one scraper run."""

from dataclasses import dataclass

import structlog
from sqlalchemy import make_url, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from catalog_scraper.core.exceptions import StoreUnavailable
from catalog_scraper.models import Base


logger = structlog.get_logger(__name__)


@dataclass
class Store:
    """The single long-lived store session context for a run."""

    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("store_closed")


def _engine_kwargs(url: str, echo: bool) -> dict:
    kwargs: dict = {"echo": echo}
    # SQLite doesn't support pool_size / max_overflow / pool_pre_ping
    if url.startswith("sqlite"):
        if make_url(url).database in (None, "", ":memory:"):
            # One shared connection, otherwise every session sees an empty DB
            kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(pool_size=5, max_overflow=5, pool_pre_ping=True)
    return kwargs


async def open_store(url: str, echo: bool = False) -> Store:
    """Connect to the store and make sure the schema exists.

    Args:
        url: SQLAlchemy async URL (postgresql+asyncpg://, sqlite+aiosqlite://)
        echo: Log emitted SQL

    Returns:
        Connected Store

    Raises:
        StoreUnavailable: If the store cannot be reached or initialized
    """
    try:
        engine = create_async_engine(url, **_engine_kwargs(url, echo))
    except (SQLAlchemyError, ImportError, ValueError) as e:
        raise StoreUnavailable(url, str(e)) from e

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.run_sync(Base.metadata.create_all)
    except (SQLAlchemyError, OSError) as e:
        await engine.dispose()
        raise StoreUnavailable(url, str(e)) from e

    logger.info("store_connected", url=engine.url.render_as_string(hide_password=True))
    return Store(
        engine=engine,
        session_factory=async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False),
    )
