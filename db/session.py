from __future__ import annotations

from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from core.settings import get_settings


settings = get_settings()

# NullPool in debug keeps local/dev reloads from holding connections open.
_engine_kwargs: dict[str, Any] = {"echo": settings.db_echo, "pool_pre_ping": True}
if settings.debug:
    _engine_kwargs["poolclass"] = NullPool
else:
    _engine_kwargs["pool_size"] = settings.db_pool_size
    _engine_kwargs["max_overflow"] = settings.db_max_overflow

engine = create_async_engine(settings.sqlalchemy_database_uri_async, **_engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield one session per request.

    Entities loaded through this session (and their memoized coverage level)
    stay confined to the request that opened it.
    """
    async with AsyncSessionLocal() as session:
        yield session
