from __future__ import annotations
import logging
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from copilot.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Hosted Postgres hands out sync-style URLs; the engine needs the asyncpg driver
ASYNC_DRIVER_PREFIXES = (
    ("postgres://", "postgresql+asyncpg://"),
    ("postgresql://", "postgresql+asyncpg://"),
    ("sqlite:///", "sqlite+aiosqlite:///"),
)


def async_database_url(url: str) -> str:
    for prefix, replacement in ASYNC_DRIVER_PREFIXES:
        if url.startswith(prefix):
            return replacement + url[len(prefix):]
    return url


engine = create_async_engine(
    async_database_url(settings.database_url),
    echo=False,
    pool_pre_ping=True,
)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncIterator[AsyncSession]:
    """Request-scoped session. Commits when the handler returns, rolls back on error."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db():
    # Chat, watchlist and insight tables register themselves on import
    import copilot.models  # noqa: F401
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database ready ({engine.url.get_backend_name()})")
