"""
Async engine and per-request session dependency.

Each request gets exactly one AsyncSession. The transaction is committed
when the request handler returns and rolled back if it raises, so every
read-modify-write in a handler is a single unit of work. Calendar cache
entries marked stale during the request are dropped after the commit.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from facility_booking.core.config import get_settings
from facility_booking.services.cache_service import discard_stale_calendars, invalidate_stale_calendars

settings = get_settings()


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # SQLite uses a single-file/static pool; pool sizing does not apply
        return {}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
    }


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **_engine_options(settings.DATABASE_URL),
)

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            discard_stale_calendars(session)
            await session.rollback()
            raise
        await invalidate_stale_calendars(session)
