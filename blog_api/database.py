from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from blog_api.cache import cache
from blog_api.config import settings
from blog_api.middleware import install_query_counter

# Tests swap this out for an in-memory SQLite engine via the get_db override.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

install_query_counter(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


@asynccontextmanager
async def transaction(session_factory: async_sessionmaker):
    """
    One session, one transaction.

    Commits when the block exits cleanly and rolls back if it raised.
    Cache keys queued by services are dropped only after the commit
    succeeds.
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            cache.discard_pending(session)
            raise
        await cache.invalidate_pending(session)


async def get_db():
    """Yield a request-scoped session; the request is one transaction."""
    async with transaction(async_session) as session:
        yield session
