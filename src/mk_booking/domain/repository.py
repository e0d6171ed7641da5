"""Repository Protocols for mk_booking.

Every status change goes through transition(): a compare-and-swap on the
expected current status. None back means another writer got there first.
"""
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_booking.domain.models import Booking, ProviderRef


class BookingRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, booking: Booking) -> Booking: ...

    async def get_by_id(self, db: AsyncSession, booking_id: str) -> Booking | None: ...

    async def booking_number_exists(self, db: AsyncSession, booking_number: str) -> bool: ...

    async def transition(
        self,
        db: AsyncSession,
        booking_id: str,
        expected: str,
        target: str,
        now: datetime,
        fields: dict[str, Any] | None = None,
        require_open_window: bool = False,
    ) -> Booking | None:
        """UPDATE ... WHERE status = expected; stamps the target's timestamp column.

        require_open_window adds `accept_deadline > now` to the condition.
        """
        ...

    async def list_expired_pending(
        self, db: AsyncSession, now: datetime, limit: int
    ) -> list[str]: ...

    async def list_for_viewer(
        self,
        db: AsyncSession,
        viewer_id: str,
        customer_id: str | None,
        provider_id: str | None,
        shop_id: str | None,
        status: str | None,
        offset: int,
        limit: int,
    ) -> list[Booking]: ...

    async def count_for_viewer(
        self,
        db: AsyncSession,
        viewer_id: str,
        customer_id: str | None,
        provider_id: str | None,
        shop_id: str | None,
        status: str | None,
    ) -> int: ...

    async def hide(self, db: AsyncSession, booking_id: str, user_id: str) -> None: ...


class ProviderDirectoryProtocol(Protocol):
    async def get_provider(self, db: AsyncSession, provider_id: str) -> ProviderRef | None: ...


class EventPublisherProtocol(Protocol):
    async def publish(self, event_type: str, payload: dict[str, Any]) -> None: ...


class LocationFeedProtocol(Protocol):
    async def last_fix(self, booking_id: str) -> tuple[float, float] | None:
        """Latest (lat, lng) reported by the provider app for this booking."""
        ...
