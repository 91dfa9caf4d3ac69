import contextlib
from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from eventpages.config.settings import settings


def engine_options(url: str) -> dict[str, Any]:
    """Dialect specific engine arguments."""
    if make_url(url).get_backend_name() == "sqlite":
        # aiosqlite gives up on a locked database after this many seconds
        return {"connect_args": {"timeout": 15}}
    return {"pool_pre_ping": True}


def create_engine(url: str) -> AsyncEngine:
    url = str(url)
    return create_async_engine(url, echo=settings.LOG_DB, **engine_options(url))


engine = create_engine(settings.database_url)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


@contextlib.asynccontextmanager
async def async_session_manager(
    auto_commit=True, session_overwrite: AsyncSession | None = None
) -> AsyncIterator[AsyncSession]:
    """Yield ``session_overwrite`` untouched, or a fresh session committed on success."""
    if session_overwrite:
        yield session_overwrite
        return

    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        if auto_commit:
            await session.commit()
