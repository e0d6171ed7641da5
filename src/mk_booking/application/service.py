"""BookingService - stateful orchestrator for the booking lifecycle.

Each booking has a single writer: an in-process asyncio.Lock per booking id,
backed by compare-and-swap UPDATEs in the repository so a second process (or
a stale read) still cannot apply two transitions from the same status.
Lock entries live only while a caller holds or waits on them, so the map
stays bounded by the bookings currently in flight.

Lock discipline:
  * location feed reads happen before the lock is taken
  * events are published after commit, once the lock is released
  * lock order is booking lock -> wallet row (settlement postings)
"""
import asyncio
import logging
from collections import defaultdict
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mk_booking.domain.models import Booking
from src.mk_booking.domain.refund import refund_amount, refund_percentage
from src.mk_booking.domain.repository import (
    BookingRepositoryProtocol,
    EventPublisherProtocol,
    LocationFeedProtocol,
    ProviderDirectoryProtocol,
)
from src.mk_booking.domain.state_machine import (
    assert_booking_transition,
    assert_customer_cancellable,
    assert_progress_step,
)
from src.mk_booking.infrastructure.directory import ProviderDirectory
from src.mk_booking.infrastructure.events import (
    BOOKING_CANCELLED,
    BOOKING_REJECTED,
    BOOKING_SETTLED,
    RedisEventPublisher,
)
from src.mk_booking.infrastructure.location import RedisLocationFeed, haversine_m
from src.mk_booking.infrastructure.persistence import BookingRepository
from src.mk_common.datetime_utils import ensure_utc, utc_now
from src.mk_common.enums import (
    ActorRole,
    BookingStatus,
    PaymentMethod,
    WalletOwnerType,
    WalletTransactionType,
)
from src.mk_common.errors import (
    ArrivalNotConfirmedError,
    BookingNotFoundError,
    InternalError,
    InvalidBookingRequestError,
    InvalidTransitionError,
    NotAuthorizedError,
    ProviderNotFoundError,
)
from src.mk_common.id_generator import generate_booking_number, generate_id
from src.mk_common.response import Pagination
from src.mk_fees.domain.repository import ConfigStoreProtocol
from src.mk_fees.domain.split import FeeSplit, split
from src.mk_fees.infrastructure.config_store import ConfigStore
from src.mk_gateway.auth.actor import Actor
from src.mk_risk.rules.cash_admission import assert_cash_admissible, fee_bearing_owner
from src.mk_wallet.application.ledger import WalletLedger
from src.mk_wallet.domain.models import WalletOwner

logger = logging.getLogger(__name__)

ACCEPT_TIMEOUT_REASON = "timeout"
_BOOKING_NUMBER_ATTEMPTS = 5


class BookingService:
    def __init__(
        self,
        repo: BookingRepositoryProtocol | None = None,
        directory: ProviderDirectoryProtocol | None = None,
        ledger: WalletLedger | None = None,
        config_store: ConfigStoreProtocol | None = None,
        events: EventPublisherProtocol | None = None,
        location: LocationFeedProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
        arrival_radius_m: int | None = None,
    ) -> None:
        self._repo: BookingRepositoryProtocol = repo or BookingRepository()
        self._directory: ProviderDirectoryProtocol = directory or ProviderDirectory()
        self._ledger = ledger or WalletLedger()
        self._config_store: ConfigStoreProtocol = config_store or ConfigStore()
        self._events: EventPublisherProtocol = events or RedisEventPublisher()
        self._location: LocationFeedProtocol = location or RedisLocationFeed()
        self._clock = clock
        self._arrival_radius_m = (
            settings.ARRIVAL_RADIUS_METERS if arrival_radius_m is None else arrival_radius_m
        )
        self._booking_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        # Holders plus waiters per booking id; the lock is dropped when it reaches 0
        self._lock_users: dict[str, int] = defaultdict(int)

    @asynccontextmanager
    async def _booking_lock(self, booking_id: str) -> AsyncIterator[None]:
        lock = self._booking_locks[booking_id]
        self._lock_users[booking_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[booking_id] -= 1
            if self._lock_users[booking_id] == 0:
                del self._lock_users[booking_id]
                del self._booking_locks[booking_id]

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_booking(
        self,
        db: AsyncSession,
        actor: Actor,
        provider_id: str,
        scheduled_at: datetime,
        service_amount: int,
        travel_fee: int,
        payment_method: str,
        latitude: float | None = None,
        longitude: float | None = None,
        customer_notes: str | None = None,
    ) -> Booking:
        if actor.role != ActorRole.CUSTOMER:
            raise NotAuthorizedError("Only customers can create bookings")
        now = self._clock()
        scheduled_at = ensure_utc(scheduled_at)
        if scheduled_at <= now:
            raise InvalidBookingRequestError("scheduled_at must be in the future")
        if service_amount <= 0 or travel_fee < 0:
            raise InvalidBookingRequestError(
                "service amount must be positive and travel fee non-negative"
            )
        if (latitude is None) != (longitude is None):
            raise InvalidBookingRequestError("latitude and longitude must be given together")

        try:
            provider = await self._directory.get_provider(db, provider_id)
            if provider is None or not provider.is_approved:
                raise ProviderNotFoundError(provider_id)

            config = await self._config_store.load(db)
            booking = Booking(
                id=generate_id(),
                booking_number=await self._unique_booking_number(db),
                customer_id=actor.user_id,
                provider_id=provider.id,
                shop_id=provider.shop_id,
                payment_method=payment_method,
                service_amount=service_amount,
                travel_fee=travel_fee,
                total_amount=service_amount + travel_fee,
                status=BookingStatus.PENDING.value,
                scheduled_at=scheduled_at,
                accept_deadline=now + timedelta(seconds=config.booking_accept_timeout_seconds),
                created_at=now,
                latitude=latitude,
                longitude=longitude,
                customer_notes=customer_notes,
            )
            if booking.is_cash:
                await assert_cash_admissible(
                    fee_bearing_owner(booking.provider_id, booking.shop_id),
                    service_amount,
                    config,
                    self._ledger.repo,
                    db,
                )

            booking = await self._repo.insert(db, booking)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Booking %s created: customer=%s provider=%s total=%d method=%s",
            booking.booking_number,
            booking.customer_id,
            booking.provider_id,
            booking.total_amount,
            booking.payment_method,
        )
        return booking

    async def _unique_booking_number(self, db: AsyncSession) -> str:
        for _ in range(_BOOKING_NUMBER_ATTEMPTS):
            candidate = generate_booking_number()
            if not await self._repo.booking_number_exists(db, candidate):
                return candidate
        raise InternalError("Could not allocate a unique booking number")

    # ------------------------------------------------------------------
    # Provider decisions
    # ------------------------------------------------------------------

    async def accept_booking(self, db: AsyncSession, actor: Actor, booking_id: str) -> Booking:
        accepted: Booking | None = None
        expired: Booking | None = None
        async with self._booking_lock(booking_id):
            try:
                booking = await self._load(db, booking_id)
                self._assert_assigned_provider(actor, booking)
                assert_booking_transition(booking.status, BookingStatus.ACCEPTED)

                now = self._clock()
                if booking.accept_deadline is not None and ensure_utc(booking.accept_deadline) <= now:
                    expired = await self._repo.transition(
                        db,
                        booking_id,
                        BookingStatus.PENDING,
                        BookingStatus.REJECTED,
                        now,
                        fields={"rejected_reason": ACCEPT_TIMEOUT_REASON},
                    )
                    await db.commit()
                else:
                    accepted = await self._repo.transition(
                        db,
                        booking_id,
                        BookingStatus.PENDING,
                        BookingStatus.ACCEPTED,
                        now,
                        require_open_window=True,
                    )
                    if accepted is None:
                        raise await self._lost_race(db, booking_id, BookingStatus.ACCEPTED)
                    await db.commit()
            except Exception:
                await db.rollback()
                raise

        if accepted is None:
            current = BookingStatus.PENDING.value
            if expired is not None:
                logger.info("Booking %s expired on late accept", booking_id)
                await self._publish_rejected(expired)
                current = expired.status
            raise InvalidTransitionError("booking", current, BookingStatus.ACCEPTED.value)
        logger.info("Booking %s accepted by provider %s", booking_id, actor.provider_id)
        return accepted

    async def reject_booking(
        self, db: AsyncSession, actor: Actor, booking_id: str, reason: str | None
    ) -> Booking:
        async with self._booking_lock(booking_id):
            try:
                booking = await self._load(db, booking_id)
                self._assert_assigned_provider(actor, booking)
                assert_booking_transition(booking.status, BookingStatus.REJECTED)
                rejected = await self._repo.transition(
                    db,
                    booking_id,
                    BookingStatus.PENDING,
                    BookingStatus.REJECTED,
                    self._clock(),
                    fields={"rejected_reason": reason or "declined"},
                )
                if rejected is None:
                    raise await self._lost_race(db, booking_id, BookingStatus.REJECTED)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        logger.info("Booking %s rejected by provider: %s", booking_id, rejected.rejected_reason)
        await self._publish_rejected(rejected)
        return rejected

    async def expire_booking(self, db: AsyncSession, booking_id: str) -> Booking | None:
        """Reject a PENDING booking whose accept window has closed.

        Returns None when the booking is no longer PENDING or still inside
        its window (a concurrent accept or reject won).
        """
        async with self._booking_lock(booking_id):
            try:
                booking = await self._repo.get_by_id(db, booking_id)
                now = self._clock()
                if (
                    booking is None
                    or booking.status != BookingStatus.PENDING
                    or booking.accept_deadline is None
                    or ensure_utc(booking.accept_deadline) > now
                ):
                    return None
                expired = await self._repo.transition(
                    db,
                    booking_id,
                    BookingStatus.PENDING,
                    BookingStatus.REJECTED,
                    now,
                    fields={"rejected_reason": ACCEPT_TIMEOUT_REASON},
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        if expired is not None:
            logger.info("Booking %s expired: accept window elapsed", booking_id)
            await self._publish_rejected(expired)
        return expired

    async def expired_booking_ids(self, db: AsyncSession, limit: int = 100) -> list[str]:
        return await self._repo.list_expired_pending(db, self._clock(), limit)

    # ------------------------------------------------------------------
    # Service progress
    # ------------------------------------------------------------------

    async def advance_status(
        self, db: AsyncSession, actor: Actor, booking_id: str, target: str
    ) -> Booking:
        target = BookingStatus(target).value
        snapshot = await self._load(db, booking_id)
        self._assert_assigned_provider(actor, snapshot)
        fix = None
        if target == BookingStatus.PROVIDER_ARRIVED and self._gate_applies(snapshot):
            fix = await self._read_fix(booking_id)

        settled: FeeSplit | None = None
        async with self._booking_lock(booking_id):
            try:
                booking = await self._load(db, booking_id)
                if target == BookingStatus.COMPLETED and booking.status == BookingStatus.COMPLETED:
                    logger.info("Booking %s already completed; settlement skipped", booking_id)
                    return booking
                assert_progress_step(booking.status, target)

                if target == BookingStatus.PROVIDER_ARRIVED and fix is not None:
                    self._assert_within_radius(booking, fix)

                now = self._clock()
                fields: dict[str, Any] = {}
                if target == BookingStatus.COMPLETED:
                    config = await self._config_store.load(db)
                    settled = split(
                        booking.total_amount,
                        booking.is_shop_affiliated,
                        config,
                        travel_fee=booking.travel_fee,
                    )
                    fields = {
                        "platform_fee": settled.platform_fee,
                        "provider_earning": settled.provider_earning,
                        "shop_earning": settled.shop_earning,
                    }
                updated = await self._repo.transition(
                    db, booking_id, booking.status, target, now, fields=fields
                )
                if updated is None:
                    raise await self._lost_race(db, booking_id, target)
                if settled is not None:
                    await self._post_settlement(db, updated, settled)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info("Booking %s -> %s", booking_id, target)
        if settled is not None:
            await self._events.publish(
                BOOKING_SETTLED,
                {
                    "booking_id": updated.id,
                    "platform_fee": settled.platform_fee,
                    "provider_earning": settled.provider_earning,
                    "shop_earning": settled.shop_earning,
                },
            )
        return updated

    def _gate_applies(self, booking: Booking) -> bool:
        return (
            self._arrival_radius_m > 0
            and booking.latitude is not None
            and booking.longitude is not None
        )

    async def _read_fix(self, booking_id: str) -> tuple[float, float] | None:
        try:
            return await self._location.last_fix(booking_id)
        except Exception:
            logger.warning("Location feed unavailable for booking %s", booking_id, exc_info=True)
            return None

    def _assert_within_radius(self, booking: Booking, fix: tuple[float, float]) -> None:
        if booking.latitude is None or booking.longitude is None:
            return
        distance = haversine_m(booking.latitude, booking.longitude, fix[0], fix[1])
        if distance > self._arrival_radius_m:
            raise ArrivalNotConfirmedError(distance, self._arrival_radius_m)

    async def _post_settlement(self, db: AsyncSession, booking: Booking, fees: FeeSplit) -> None:
        if booking.payment_method == PaymentMethod.CASH:
            # Provider holds the full amount in hand; the platform fee is owed from the wallet
            if fees.platform_fee > 0:
                await self._ledger.post(
                    db,
                    fee_bearing_owner(booking.provider_id, booking.shop_id),
                    WalletTransactionType.PLATFORM_FEE,
                    -fees.platform_fee,
                    booking_id=booking.id,
                    allow_negative=True,
                    payment_method=booking.payment_method,
                    description=f"Platform fee for cash booking {booking.booking_number}",
                )
            return

        if fees.provider_earning > 0:
            await self._ledger.post(
                db,
                WalletOwner(WalletOwnerType.PROVIDER.value, booking.provider_id),
                WalletTransactionType.EARNING,
                fees.provider_earning,
                booking_id=booking.id,
                payment_method=booking.payment_method,
                description=f"Earning for booking {booking.booking_number}",
            )
        if booking.shop_id and fees.shop_earning:
            await self._ledger.post(
                db,
                WalletOwner(WalletOwnerType.SHOP.value, booking.shop_id),
                WalletTransactionType.EARNING,
                fees.shop_earning,
                booking_id=booking.id,
                payment_method=booking.payment_method,
                description=f"Shop share for booking {booking.booking_number}",
            )

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    async def cancel_booking(
        self, db: AsyncSession, actor: Actor, booking_id: str, reason: str | None
    ) -> Booking:
        return await self._cancel(db, actor, booking_id, reason, administrative=False)

    async def admin_cancel_booking(
        self, db: AsyncSession, actor: Actor, booking_id: str, reason: str | None
    ) -> Booking:
        if not actor.is_admin:
            raise NotAuthorizedError("Admin role required")
        return await self._cancel(db, actor, booking_id, reason, administrative=True)

    async def _cancel(
        self,
        db: AsyncSession,
        actor: Actor,
        booking_id: str,
        reason: str | None,
        administrative: bool,
    ) -> Booking:
        async with self._booking_lock(booking_id):
            try:
                booking = await self._load(db, booking_id)
                if administrative:
                    assert_booking_transition(booking.status, BookingStatus.CANCELLED)
                else:
                    if actor.user_id != booking.customer_id:
                        raise NotAuthorizedError("Only the booking's customer can cancel it")
                    assert_customer_cancellable(booking.status)

                now = self._clock()
                if booking.is_cash:
                    # Nothing was collected up front
                    pct = 0
                elif administrative:
                    pct = 100
                else:
                    config = await self._config_store.load(db)
                    pct = refund_percentage(ensure_utc(booking.scheduled_at), now, config)
                cancelled = await self._repo.transition(
                    db,
                    booking_id,
                    booking.status,
                    BookingStatus.CANCELLED,
                    now,
                    fields={
                        "cancelled_by": actor.user_id,
                        "cancel_reason": reason,
                        "refund_percentage": pct,
                        "refund_amount": refund_amount(booking.total_amount, pct),
                    },
                )
                if cancelled is None:
                    raise await self._lost_race(db, booking_id, BookingStatus.CANCELLED)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "Booking %s cancelled by %s (admin=%s): refund %d%% = %d",
            booking_id,
            actor.user_id,
            administrative,
            cancelled.refund_percentage or 0,
            cancelled.refund_amount or 0,
        )
        await self._events.publish(
            BOOKING_CANCELLED,
            {
                "booking_id": cancelled.id,
                "cancelled_by": cancelled.cancelled_by,
                "refund_percentage": cancelled.refund_percentage,
                "refund_amount": cancelled.refund_amount,
            },
        )
        return cancelled

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_booking(self, db: AsyncSession, actor: Actor, booking_id: str) -> Booking:
        booking = await self._load(db, booking_id)
        if not actor.is_admin and not self._is_party(actor, booking):
            raise NotAuthorizedError("Not a party to this booking")
        return booking

    async def list_bookings(
        self,
        db: AsyncSession,
        actor: Actor,
        page: int,
        limit: int,
        status: str | None = None,
    ) -> tuple[list[Booking], Pagination]:
        filters: dict[str, str | None] = {"customer_id": None, "provider_id": None, "shop_id": None}
        if actor.role == ActorRole.CUSTOMER:
            filters["customer_id"] = actor.user_id
        elif actor.role == ActorRole.PROVIDER:
            if not actor.provider_id:
                raise NotAuthorizedError("Provider token carries no provider_id")
            filters["provider_id"] = actor.provider_id
        elif actor.role == ActorRole.SHOP_OWNER:
            if not actor.shop_id:
                raise NotAuthorizedError("Shop owner token carries no shop_id")
            filters["shop_id"] = actor.shop_id

        offset = (page - 1) * limit
        items = await self._repo.list_for_viewer(
            db, actor.user_id, status=status, offset=offset, limit=limit, **filters
        )
        total = await self._repo.count_for_viewer(db, actor.user_id, status=status, **filters)
        return items, Pagination.of(page, limit, total)

    async def hide_booking(self, db: AsyncSession, actor: Actor, booking_id: str) -> None:
        try:
            booking = await self._load(db, booking_id)
            if not self._is_party(actor, booking):
                raise NotAuthorizedError("Only parties of a booking can hide it")
            if not booking.is_terminal:
                raise InvalidBookingRequestError("only finished bookings can be hidden")
            await self._repo.hide(db, booking_id, actor.user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _load(self, db: AsyncSession, booking_id: str) -> Booking:
        booking = await self._repo.get_by_id(db, booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    async def _lost_race(
        self, db: AsyncSession, booking_id: str, target: str
    ) -> InvalidTransitionError:
        current = await self._repo.get_by_id(db, booking_id)
        status = current.status if current else "UNKNOWN"
        return InvalidTransitionError(
            "booking", getattr(status, "value", status), getattr(target, "value", target)
        )

    @staticmethod
    def _is_party(actor: Actor, booking: Booking) -> bool:
        if booking.is_party(actor.user_id, actor.provider_id):
            return True
        return (
            actor.role == ActorRole.SHOP_OWNER
            and actor.shop_id is not None
            and actor.shop_id == booking.shop_id
        )

    @staticmethod
    def _assert_assigned_provider(actor: Actor, booking: Booking) -> None:
        if actor.role != ActorRole.PROVIDER or actor.provider_id != booking.provider_id:
            raise NotAuthorizedError("Only the assigned provider can act on this booking")

    async def _publish_rejected(self, booking: Booking) -> None:
        await self._events.publish(
            BOOKING_REJECTED,
            {"booking_id": booking.id, "reason": booking.rejected_reason},
        )


_booking_service: BookingService | None = None


def get_booking_service() -> BookingService:
    """Process-wide instance; the sweeper and the API must share its locks."""
    global _booking_service  # noqa: PLW0603
    if _booking_service is None:
        _booking_service = BookingService()
    return _booking_service
