"""Shared Redis connection for the two Redis-facing adapters.

* RedisLocationFeed reads `{LOCATION_KEY_PREFIX}{booking_id}` hashes
  (`lat`, `lng`) written by the provider app's telemetry pipeline.
* RedisEventPublisher appends booking events to the `EVENT_STREAM` stream.

Booking state and balances never live here; PostgreSQL is the only source of
truth, and a Redis outage degrades to "no location fix" / dropped events.
"""

import redis.asyncio as aioredis

from config.settings import settings

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Lazily create the client; decoded responses so hash fields come back as str."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
        )
    return _redis_pool


async def close_redis() -> None:
    """Called from the app lifespan on shutdown."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
