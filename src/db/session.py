"""Async SQLAlchemy engine and per-request sessions for the bookmark store."""
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import Settings, get_settings


def engine_options(settings: Settings) -> dict[str, Any]:
    """
    Build create_async_engine keyword arguments for the configured database.

    Pool sizing applies to server databases only; SQLite (used for local
    development) picks its own pool class and rejects these arguments.
    """
    options: dict[str, Any] = {"echo": False}
    if make_url(settings.database_url).get_backend_name() == "sqlite":
        return options
    options.update(
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )
    return options


settings = get_settings()

engine = create_async_engine(settings.database_url, **engine_options(settings))

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """
    Yield a bookmark-store session scoped to one request.

    Services only flush; the single commit happens here when the request
    finishes, and any exception rolls the whole request back.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
