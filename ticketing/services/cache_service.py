"""
Redis caching service for event snapshots.

CACHING STRATEGY
================

What we cache:
  - Event snapshots joined onto bookings, verification results and tickets
  - Cache key pattern: "events:snapshot:{event_id}"

Why:
  - Gate staff verify tickets in bursts and every verification joins the event
  - Events change rarely compared to how often they are read

Invalidation strategy:
  - On event update or delete: delete that event's key
  - TTL-based expiry as safety net (5 minutes)

Redis is advisory. Every failure is logged and treated as a cache miss, so
an outage degrades to direct database reads rather than failed requests.
"""

import json
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
from ticketing.core.config import get_settings
from ticketing.core.logging import get_logger
from ticketing.core.metrics import record_cache_operation, redis_connection_errors

logger = get_logger(__name__)
settings = get_settings()

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except (RedisError, OSError) as e:
            redis_connection_errors.inc()
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def _make_event_snapshot_key(event_id: str) -> str:
    return f"events:snapshot:{event_id}"


async def get_cached_event_snapshot(event_id: str) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = _make_event_snapshot_key(event_id)
    try:
        data = await client.get(key)
    except RedisError as e:
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", hit=data is not None)
    if data:
        logger.debug("cache_hit", key=key)
        return json.loads(data)
    logger.debug("cache_miss", key=key)
    return None


async def set_cached_event_snapshot(event_id: str, data: dict) -> None:
    """Cache an event snapshot with TTL."""
    client = await get_redis()
    if not client:
        return

    key = _make_event_snapshot_key(event_id)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except RedisError as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_event_snapshot(event_id: str) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_event_snapshot_key(event_id)
    try:
        await client.delete(key)
        logger.info("cache_invalidated", key=key)
    except RedisError as e:
        logger.error("cache_invalidation_error", key=key, error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except RedisError as e:
        return {"status": "error", "error": str(e)}
