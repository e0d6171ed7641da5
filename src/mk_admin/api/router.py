"""Admin REST API - payout processing, administrative cancel, wallet corrections, audit."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_admin.application.ledger_audit import verify_ledger
from src.mk_booking.application.schemas import BookingResponse, CancelBookingRequest
from src.mk_booking.application.service import BookingService, get_booking_service
from src.mk_common.database import get_db_session
from src.mk_common.enums import PayoutStatus
from src.mk_common.response import ApiResponse, success_response
from src.mk_gateway.auth.actor import Actor
from src.mk_gateway.auth.dependencies import require_admin
from src.mk_payout.application.schemas import (
    PayoutListResponse,
    PayoutReasonRequest,
    PayoutResponse,
    ProcessPayoutRequest,
)
from src.mk_payout.application.service import PayoutService, get_payout_service
from src.mk_wallet.application.schemas import AdjustmentRequest
from src.mk_wallet.application.service import WalletApplicationService, get_wallet_service
from src.mk_wallet.domain.models import WalletOwner

router = APIRouter(prefix="/admin", tags=["admin"])

AdminDep = Annotated[Actor, Depends(require_admin)]
DbDep = Annotated[AsyncSession, Depends(get_db_session)]
PayoutsDep = Annotated[PayoutService, Depends(get_payout_service)]


def _respond(data: object, request: Request) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


# ---------------------------------------------------------------------------
# Payouts
# ---------------------------------------------------------------------------


@router.get("/payouts")
async def list_payouts(
    admin: AdminDep,
    db: DbDep,
    service: PayoutsDep,
    request: Request,
    status: PayoutStatus | None = Query(None, description="Filter by PayoutStatus"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    items, pagination = await service.list_payouts(
        db, status.value if status else None, page, limit
    )
    data = PayoutListResponse(
        items=[PayoutResponse.from_payout(p) for p in items], pagination=pagination
    )
    return _respond(data.model_dump(mode="json"), request)


@router.post("/payouts/{payout_id}/processing")
async def mark_payout_processing(
    payout_id: str, admin: AdminDep, db: DbDep, service: PayoutsDep, request: Request
) -> ApiResponse:
    payout = await service.mark_processing(db, payout_id, admin.user_id)
    return _respond(PayoutResponse.from_payout(payout).model_dump(mode="json"), request)


@router.post("/payouts/{payout_id}/process")
async def process_payout(
    payout_id: str,
    body: ProcessPayoutRequest,
    admin: AdminDep,
    db: DbDep,
    service: PayoutsDep,
    request: Request,
) -> ApiResponse:
    payout = await service.process_payout(db, payout_id, admin.user_id, body.reference_number)
    return _respond(PayoutResponse.from_payout(payout).model_dump(mode="json"), request)


@router.post("/payouts/{payout_id}/reject")
async def reject_payout(
    payout_id: str,
    body: PayoutReasonRequest,
    admin: AdminDep,
    db: DbDep,
    service: PayoutsDep,
    request: Request,
) -> ApiResponse:
    payout = await service.reject_payout(db, payout_id, admin.user_id, body.reason)
    return _respond(PayoutResponse.from_payout(payout).model_dump(mode="json"), request)


@router.post("/payouts/{payout_id}/fail")
async def fail_payout(
    payout_id: str,
    body: PayoutReasonRequest,
    admin: AdminDep,
    db: DbDep,
    service: PayoutsDep,
    request: Request,
) -> ApiResponse:
    payout = await service.fail_payout(db, payout_id, admin.user_id, body.reason)
    return _respond(PayoutResponse.from_payout(payout).model_dump(mode="json"), request)


# ---------------------------------------------------------------------------
# Bookings & wallets
# ---------------------------------------------------------------------------


@router.post("/bookings/{booking_id}/cancel")
async def admin_cancel_booking(
    booking_id: str,
    body: CancelBookingRequest,
    admin: AdminDep,
    db: DbDep,
    service: Annotated[BookingService, Depends(get_booking_service)],
    request: Request,
) -> ApiResponse:
    booking = await service.admin_cancel_booking(db, admin, booking_id, body.reason)
    return _respond(BookingResponse.from_booking(booking).model_dump(mode="json"), request)


@router.post("/wallets/adjust")
async def adjust_wallet(
    body: AdjustmentRequest,
    admin: AdminDep,
    db: DbDep,
    service: Annotated[WalletApplicationService, Depends(get_wallet_service)],
    request: Request,
) -> ApiResponse:
    tx = await service.adjust(
        db,
        WalletOwner(body.owner_type, body.owner_id),
        body.amount_cents,
        body.description,
        admin.user_id,
    )
    return _respond(tx.model_dump(mode="json"), request)


@router.get("/ledger/verify")
async def verify_ledger_endpoint(admin: AdminDep, db: DbDep, request: Request) -> ApiResponse:
    return _respond(await verify_ledger(db), request)
