"""BookingRepository - raw SQL persistence implementation.

Status changes are compare-and-swap UPDATEs on the expected current status;
0 rows means the booking moved under us and the caller raises
InvalidTransitionError. Transaction ownership: the CALLER commits.
"""
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_booking.domain.models import Booking
from src.mk_booking.domain.state_machine import TIMESTAMP_COLUMNS
from src.mk_common.errors import InternalError

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, booking_number, customer_id, provider_id, shop_id, payment_method,
    service_amount, travel_fee, total_amount, status,
    platform_fee, provider_earning, shop_earning,
    scheduled_at, accept_deadline, created_at, accepted_at, en_route_at,
    arrived_at, started_at, completed_at, cancelled_at, rejected_at, updated_at,
    cancelled_by, cancel_reason, rejected_reason, refund_percentage, refund_amount,
    latitude, longitude, customer_notes
"""

_INSERT_BOOKING_SQL = text(f"""
    INSERT INTO bookings (id, booking_number, customer_id, provider_id, shop_id,
        payment_method, service_amount, travel_fee, total_amount, status,
        scheduled_at, accept_deadline, created_at, latitude, longitude, customer_notes)
    VALUES (:id, :booking_number, :customer_id, :provider_id, :shop_id,
        :payment_method, :service_amount, :travel_fee, :total_amount, :status,
        :scheduled_at, :accept_deadline, :created_at, :latitude, :longitude, :customer_notes)
    RETURNING {_SELECT_COLUMNS}
""")

_GET_BOOKING_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM bookings WHERE id = :id
""")

_NUMBER_EXISTS_SQL = text("""
    SELECT 1 FROM bookings WHERE booking_number = :booking_number
""")

_LIST_EXPIRED_SQL = text("""
    SELECT id
    FROM bookings
    WHERE status = 'PENDING' AND accept_deadline <= :now
    ORDER BY accept_deadline ASC
    LIMIT :limit
""")

_VIEWER_FILTER = """
    WHERE (CAST(:customer_id AS TEXT) IS NULL OR b.customer_id = :customer_id)
      AND (CAST(:provider_id AS TEXT) IS NULL OR b.provider_id = :provider_id)
      AND (CAST(:shop_id AS TEXT) IS NULL OR b.shop_id = :shop_id)
      AND (CAST(:status AS TEXT) IS NULL OR b.status = :status)
      AND NOT EXISTS (
          SELECT 1 FROM booking_visibility v
          WHERE v.booking_id = b.id AND v.user_id = :viewer_id
      )
"""

_LIST_FOR_VIEWER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM bookings b
    {_VIEWER_FILTER}
    ORDER BY b.created_at DESC, b.id DESC
    OFFSET :offset
    LIMIT :limit
""")

_COUNT_FOR_VIEWER_SQL = text(f"""
    SELECT COUNT(*)
    FROM bookings b
    {_VIEWER_FILTER}
""")

_HIDE_SQL = text("""
    INSERT INTO booking_visibility (booking_id, user_id)
    VALUES (:booking_id, :user_id)
    ON CONFLICT (booking_id, user_id) DO NOTHING
""")

# Columns a transition may write besides status and its timestamp
_TRANSITION_FIELDS = frozenset({
    "platform_fee", "provider_earning", "shop_earning",
    "cancelled_by", "cancel_reason", "rejected_reason",
    "refund_percentage", "refund_amount",
})


def _build_transition_sql(target: str, fields: list[str], require_open_window: bool) -> Any:
    assignments = ["status = :target", "updated_at = :now"]
    ts_column = TIMESTAMP_COLUMNS.get(target)
    if ts_column:
        assignments.append(f"{ts_column} = :now")
    assignments.extend(f"{name} = :{name}" for name in fields)
    window = " AND accept_deadline > :now" if require_open_window else ""
    return text(f"""
        UPDATE bookings
        SET {", ".join(assignments)}
        WHERE id = :id AND status = :expected{window}
        RETURNING {_SELECT_COLUMNS}
    """)


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_booking(row: Any) -> Booking:
    """Convert a DB result row to a Booking domain object."""
    return Booking(
        id=row.id,
        booking_number=row.booking_number,
        customer_id=row.customer_id,
        provider_id=row.provider_id,
        shop_id=row.shop_id,
        payment_method=row.payment_method,
        service_amount=row.service_amount,
        travel_fee=row.travel_fee,
        total_amount=row.total_amount,
        status=row.status,
        platform_fee=row.platform_fee,
        provider_earning=row.provider_earning,
        shop_earning=row.shop_earning,
        scheduled_at=row.scheduled_at,
        accept_deadline=row.accept_deadline,
        created_at=row.created_at,
        accepted_at=row.accepted_at,
        en_route_at=row.en_route_at,
        arrived_at=row.arrived_at,
        started_at=row.started_at,
        completed_at=row.completed_at,
        cancelled_at=row.cancelled_at,
        rejected_at=row.rejected_at,
        updated_at=row.updated_at,
        cancelled_by=row.cancelled_by,
        cancel_reason=row.cancel_reason,
        rejected_reason=row.rejected_reason,
        refund_percentage=row.refund_percentage,
        refund_amount=row.refund_amount,
        latitude=row.latitude,
        longitude=row.longitude,
        customer_notes=row.customer_notes,
    )


def _status_value(status: Any) -> str:
    return getattr(status, "value", status)


class BookingRepository:
    async def insert(self, db: AsyncSession, booking: Booking) -> Booking:
        result = await db.execute(
            _INSERT_BOOKING_SQL,
            {
                "id": booking.id,
                "booking_number": booking.booking_number,
                "customer_id": booking.customer_id,
                "provider_id": booking.provider_id,
                "shop_id": booking.shop_id,
                "payment_method": booking.payment_method,
                "service_amount": booking.service_amount,
                "travel_fee": booking.travel_fee,
                "total_amount": booking.total_amount,
                "status": booking.status,
                "scheduled_at": booking.scheduled_at,
                "accept_deadline": booking.accept_deadline,
                "created_at": booking.created_at,
                "latitude": booking.latitude,
                "longitude": booking.longitude,
                "customer_notes": booking.customer_notes,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Booking insert returned no rows")
        return _row_to_booking(row)

    async def get_by_id(self, db: AsyncSession, booking_id: str) -> Booking | None:
        row = (await db.execute(_GET_BOOKING_SQL, {"id": booking_id})).fetchone()
        return _row_to_booking(row) if row else None

    async def booking_number_exists(self, db: AsyncSession, booking_number: str) -> bool:
        result = await db.execute(_NUMBER_EXISTS_SQL, {"booking_number": booking_number})
        return result.fetchone() is not None

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
        fields = fields or {}
        unknown = set(fields) - _TRANSITION_FIELDS
        if unknown:
            raise InternalError(f"Unsupported booking transition fields: {sorted(unknown)}")
        target = _status_value(target)
        stmt = _build_transition_sql(target, sorted(fields), require_open_window)
        result = await db.execute(
            stmt,
            {
                "id": booking_id,
                "expected": _status_value(expected),
                "target": target,
                "now": now,
                **fields,
            },
        )
        row = result.fetchone()
        return _row_to_booking(row) if row else None

    async def list_expired_pending(
        self, db: AsyncSession, now: datetime, limit: int
    ) -> list[str]:
        result = await db.execute(_LIST_EXPIRED_SQL, {"now": now, "limit": limit})
        return [row.id for row in result.fetchall()]

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
    ) -> list[Booking]:
        result = await db.execute(
            _LIST_FOR_VIEWER_SQL,
            {
                "viewer_id": viewer_id,
                "customer_id": customer_id,
                "provider_id": provider_id,
                "shop_id": shop_id,
                "status": status,
                "offset": offset,
                "limit": limit,
            },
        )
        return [_row_to_booking(row) for row in result.fetchall()]

    async def count_for_viewer(
        self,
        db: AsyncSession,
        viewer_id: str,
        customer_id: str | None,
        provider_id: str | None,
        shop_id: str | None,
        status: str | None,
    ) -> int:
        result = await db.execute(
            _COUNT_FOR_VIEWER_SQL,
            {
                "viewer_id": viewer_id,
                "customer_id": customer_id,
                "provider_id": provider_id,
                "shop_id": shop_id,
                "status": status,
            },
        )
        return int(result.scalar_one())

    async def hide(self, db: AsyncSession, booking_id: str, user_id: str) -> None:
        await db.execute(_HIDE_SQL, {"booking_id": booking_id, "user_id": user_id})
