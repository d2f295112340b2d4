"""Async engine and session factory."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from gatekeeper.core.config import get_settings
from gatekeeper.db.base import Base


def create_engine(database_url: Optional[str] = None, **kwargs) -> AsyncEngine:
    """Create the async engine for ``database_url`` (defaults to settings)."""
    return create_async_engine(database_url or get_settings().database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    # Import models so they register on the metadata
    import gatekeeper.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
