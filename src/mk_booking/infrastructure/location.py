"""Provider location feed (Redis hash written by the telemetry gateway).

Key: {LOCATION_KEY_PREFIX}{booking_id} -> {"lat": "...", "lng": "..."}
"""
import logging
import math

from config.settings import settings
from src.mk_common.redis_client import get_redis

logger = logging.getLogger(__name__)

_EARTH_RADIUS_M = 6_371_000.0


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in metres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * _EARTH_RADIUS_M * math.asin(math.sqrt(a))


class RedisLocationFeed:
    def __init__(self, key_prefix: str | None = None) -> None:
        self._prefix = key_prefix or settings.LOCATION_KEY_PREFIX

    async def last_fix(self, booking_id: str) -> tuple[float, float] | None:
        redis = await get_redis()
        data = await redis.hgetall(f"{self._prefix}{booking_id}")  # type: ignore[misc]
        if not data or "lat" not in data or "lng" not in data:
            return None
        try:
            return float(data["lat"]), float(data["lng"])
        except ValueError:
            logger.warning("Malformed location fix for booking %s: %s", booking_id, data)
            return None
