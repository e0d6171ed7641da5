"""Booking events → Redis stream.

Published after the DB commit and after the booking lock is released. A
failed publish is logged and dropped; the committed transition stands.
"""
import json
import logging
from typing import Any

from config.settings import settings
from src.mk_common.datetime_utils import utc_now
from src.mk_common.redis_client import get_redis

logger = logging.getLogger(__name__)

BOOKING_SETTLED = "booking.settled"
BOOKING_CANCELLED = "booking.cancelled"
BOOKING_REJECTED = "booking.rejected"


class RedisEventPublisher:
    def __init__(self, stream: str | None = None) -> None:
        self._stream = stream or settings.EVENT_STREAM

    async def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        fields = {
            "type": event_type,
            "payload": json.dumps(payload, default=str),
            "published_at": utc_now().isoformat(),
        }
        try:
            redis = await get_redis()
            await redis.xadd(self._stream, fields)  # type: ignore[arg-type]
        except Exception:
            logger.exception("Failed to publish %s: %s", event_type, payload)
