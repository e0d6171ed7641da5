"""Unit tests for the Redis-backed event publisher and location feed."""
import json
from unittest.mock import AsyncMock, patch

import pytest

from src.mk_booking.infrastructure.events import BOOKING_SETTLED, RedisEventPublisher
from src.mk_booking.infrastructure.location import RedisLocationFeed, haversine_m


class TestRedisEventPublisher:
    async def test_xadd_to_stream(self) -> None:
        redis = AsyncMock()
        with patch(
            "src.mk_booking.infrastructure.events.get_redis", AsyncMock(return_value=redis)
        ):
            await RedisEventPublisher(stream="test-events").publish(
                BOOKING_SETTLED, {"booking_id": "bk-1", "platform_fee": 8000}
            )
        stream, fields = redis.xadd.await_args[0]
        assert stream == "test-events"
        assert fields["type"] == "booking.settled"
        assert json.loads(fields["payload"]) == {"booking_id": "bk-1", "platform_fee": 8000}

    async def test_publish_failure_is_swallowed(self) -> None:
        redis = AsyncMock()
        redis.xadd.side_effect = ConnectionError("redis down")
        with patch(
            "src.mk_booking.infrastructure.events.get_redis", AsyncMock(return_value=redis)
        ):
            await RedisEventPublisher().publish(BOOKING_SETTLED, {"booking_id": "bk-1"})


class TestRedisLocationFeed:
    @pytest.mark.parametrize(
        ("stored", "expected"),
        [
            ({"lat": "14.5547", "lng": "121.0244"}, (14.5547, 121.0244)),
            ({}, None),
            ({"lat": "14.5547"}, None),
            ({"lat": "north", "lng": "east"}, None),
        ],
    )
    async def test_last_fix(self, stored: dict, expected: tuple | None) -> None:
        redis = AsyncMock()
        redis.hgetall.return_value = stored
        with patch(
            "src.mk_booking.infrastructure.location.get_redis", AsyncMock(return_value=redis)
        ):
            fix = await RedisLocationFeed(key_prefix="loc:").last_fix("bk-1")
        assert fix == expected
        redis.hgetall.assert_awaited_once_with("loc:bk-1")


class TestHaversine:
    def test_same_point(self) -> None:
        assert haversine_m(14.5547, 121.0244, 14.5547, 121.0244) == 0

    def test_makati_to_quezon_city(self) -> None:
        assert 13000 < haversine_m(14.5547, 121.0244, 14.6760, 121.0437) < 14000

    def test_one_degree_latitude(self) -> None:
        assert haversine_m(0, 0, 1, 0) == pytest.approx(111_195, rel=1e-3)
