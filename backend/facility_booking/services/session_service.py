"""
Session lifecycle: create on login, destroy on logout.

Redis Session Store:
  Key:   "session:{sid}"  ->  employee id
  TTL:   SESSION_TTL_SECONDS, set on creation

  Unlike the listing cache, sessions fail CLOSED: if Redis cannot be read,
  the request is treated as unauthenticated rather than guessing.
"""

from typing import Optional

import redis.asyncio as redis

from facility_booking.core.config import get_settings
from facility_booking.core.logging import get_logger
from facility_booking.core.security import new_session_id
from facility_booking.infrastructure.redis_client import get_redis
from facility_booking.services.interfaces.memory_session_store import MemorySessionStore
from facility_booking.services.interfaces.session_store import SessionStore

logger = get_logger(__name__)

SESSION_KEY_PREFIX = "session:"


class RedisSessionStore(SessionStore):
    def __init__(self, ttl_seconds: int):
        self._ttl = ttl_seconds

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    async def _client(self) -> redis.Redis:
        client = await get_redis()
        if client is None:
            raise RuntimeError("Redis session store selected but Redis is unavailable")
        return client

    async def create(self, employee_id: int) -> str:
        client = await self._client()
        session_id = new_session_id()
        await client.setex(self._key(session_id), self._ttl, str(employee_id))
        return session_id

    async def get(self, session_id: str) -> Optional[int]:
        try:
            client = await self._client()
            value = await client.get(self._key(session_id))
        except (redis.RedisError, RuntimeError) as e:
            logger.error("session_lookup_failed", error=str(e))
            return None
        return int(value) if value is not None else None

    async def destroy(self, session_id: str) -> None:
        client = await self._client()
        await client.delete(self._key(session_id))


def build_session_store() -> SessionStore:
    """
    Pick the session store from settings.

    SESSION_STORE=redis needs REDIS_ENABLED; otherwise sessions stay in-process.
    """
    settings = get_settings()
    if settings.SESSION_STORE == "redis" and settings.REDIS_ENABLED:
        return RedisSessionStore(settings.SESSION_TTL_SECONDS)
    return MemorySessionStore(settings.SESSION_TTL_SECONDS)


_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Session store singleton; also used as a FastAPI dependency."""
    global _store
    if _store is None:
        _store = build_session_store()
        logger.info("session_store_selected", store=type(_store).__name__)
    return _store


async def start_session(employee_id: int) -> str:
    session_id = await get_session_store().create(employee_id)
    logger.info("session_started", employee_id=employee_id)
    return session_id


async def end_session(session_id: str) -> None:
    await get_session_store().destroy(session_id)
    logger.info("session_ended")
