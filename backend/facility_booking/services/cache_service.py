"""
Redis caching service for facility calendars.

CACHING STRATEGY
================

What we cache:
  - The calendar-visible bookings of one facility (JSON-serialized list)
  - Cache key pattern: "calendar:{slug}"

Why:
  - The calendar is the most frequent read: every employee opening a
    facility page fetches it
  - It only changes when a booking on that facility is created or moves
    through one of its state machines

Invalidation strategy:
  - Writes never touch Redis directly. They mark the facility stale on the
    session (mark_calendar_stale) and get_db deletes the marked keys only
    after the transaction commits (invalidate_stale_calendars). A calendar
    read racing the write therefore cannot re-cache pre-commit rows after
    the delete.
  - A rolled-back transaction discards its marks
  - TTL-based expiry as safety net (REDIS_CACHE_TTL)

Failure mode:
  - The cache fails OPEN: any Redis error is logged and treated as a miss.
    The database stays authoritative.
"""

import json
from typing import Optional

import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.core.config import get_settings
from facility_booking.core.logging import get_logger
from facility_booking.core.metrics import record_cache_operation
from facility_booking.infrastructure.redis_client import get_redis

logger = get_logger(__name__)

STALE_CALENDARS_KEY = "stale_calendars"


def _make_calendar_key(slug: str) -> str:
    return f"calendar:{slug}"


async def get_cached_calendar(slug: str) -> Optional[list[dict]]:
    client = await get_redis()
    if not client:
        return None

    key = _make_calendar_key(slug)
    try:
        data = await client.get(key)
    except redis.RedisError as e:
        record_cache_operation("get", "error")
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", "hit" if data is not None else "miss")
    if data:
        logger.debug("cache_hit", key=key)
        return json.loads(data)
    logger.debug("cache_miss", key=key)
    return None


async def set_cached_calendar(slug: str, bookings: list[dict]) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_calendar_key(slug)
    ttl = get_settings().REDIS_CACHE_TTL
    try:
        await client.setex(key, ttl, json.dumps(bookings, default=str))
        record_cache_operation("set", "ok")
        logger.debug("cache_set", key=key, ttl=ttl)
    except redis.RedisError as e:
        record_cache_operation("set", "error")
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_calendar(slug: str) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_calendar_key(slug)
    try:
        deleted = await client.delete(key)
        record_cache_operation("delete", "ok")
        logger.info("cache_invalidated", key=key, keys_deleted=deleted)
    except redis.RedisError as e:
        record_cache_operation("delete", "error")
        logger.error("cache_invalidation_error", key=key, error=str(e))


def mark_calendar_stale(db: AsyncSession, slug: str) -> None:
    """Queue the facility's calendar for invalidation once `db` commits."""
    db.info.setdefault(STALE_CALENDARS_KEY, set()).add(slug)


def discard_stale_calendars(db: AsyncSession) -> None:
    db.info.pop(STALE_CALENDARS_KEY, None)


async def invalidate_stale_calendars(db: AsyncSession) -> None:
    """Delete every calendar marked stale on `db`. Call after commit."""
    for slug in sorted(db.info.pop(STALE_CALENDARS_KEY, ())):
        await invalidate_calendar(slug)


async def get_cache_stats() -> dict:
    """Redis statistics for the health endpoint."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
    except redis.RedisError as e:
        return {"status": "error", "error": str(e)}

    hits = info.get("keyspace_hits", 0)
    misses = info.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "hits": hits,
        "misses": misses,
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
    }
