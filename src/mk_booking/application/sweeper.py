"""AcceptTimeoutSweeper - rejects PENDING bookings whose accept window closed.

Runs as a background task started in the app lifespan. Each booking is
expired in its own session through BookingService.expire_booking, so it
shares the per-booking locks with the API; an accept racing the sweep either
wins or fails with InvalidTransitionError. A failure on one booking is
logged and the sweep moves on.
"""
import asyncio
import logging
from collections.abc import Callable
from typing import Any

from config.settings import settings
from src.mk_booking.application.service import BookingService
from src.mk_common.database import async_session_factory

logger = logging.getLogger(__name__)


class AcceptTimeoutSweeper:
    def __init__(
        self,
        service: BookingService,
        session_factory: Callable[[], Any] = async_session_factory,
        interval_seconds: float | None = None,
        batch_size: int = 100,
    ) -> None:
        self._service = service
        self._session_factory = session_factory
        self._interval = (
            settings.ACCEPT_SWEEP_INTERVAL_SECONDS if interval_seconds is None else interval_seconds
        )
        self._batch_size = batch_size

    async def sweep_once(self) -> int:
        """One pass over expired PENDING bookings. Returns how many were rejected."""
        async with self._session_factory() as db:
            booking_ids = await self._service.expired_booking_ids(db, self._batch_size)

        expired = 0
        for booking_id in booking_ids:
            try:
                async with self._session_factory() as db:
                    if await self._service.expire_booking(db, booking_id) is not None:
                        expired += 1
            except Exception:
                logger.exception("Accept-timeout sweep failed for booking %s", booking_id)
        if expired:
            logger.info("Accept-timeout sweep rejected %d booking(s)", expired)
        return expired

    async def run_forever(self) -> None:
        logger.info("Accept-timeout sweeper started (interval=%ss)", self._interval)
        while True:
            try:
                await self.sweep_once()
            except Exception:
                logger.exception("Accept-timeout sweep pass failed")
            await asyncio.sleep(self._interval)
