"""mk_booking REST API - booking lifecycle endpoints, all require JWT authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_booking.application.schemas import (
    AdvanceStatusRequest,
    BookingListResponse,
    BookingResponse,
    CancelBookingRequest,
    CreateBookingRequest,
    RejectBookingRequest,
)
from src.mk_booking.application.service import BookingService, get_booking_service
from src.mk_common.database import get_db_session
from src.mk_common.enums import BookingStatus
from src.mk_common.response import ApiResponse, success_response
from src.mk_gateway.auth.actor import Actor
from src.mk_gateway.auth.dependencies import get_current_actor

router = APIRouter(prefix="/bookings", tags=["bookings"])

ActorDep = Annotated[Actor, Depends(get_current_actor)]
DbDep = Annotated[AsyncSession, Depends(get_db_session)]
ServiceDep = Annotated[BookingService, Depends(get_booking_service)]


def _respond(data: dict, request: Request) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("")
async def create_booking(
    body: CreateBookingRequest,
    actor: ActorDep,
    db: DbDep,
    service: ServiceDep,
    request: Request,
) -> ApiResponse:
    booking = await service.create_booking(
        db,
        actor,
        provider_id=body.provider_id,
        scheduled_at=body.scheduled_at,
        service_amount=body.service_amount_cents,
        travel_fee=body.travel_fee_cents,
        payment_method=body.payment_method.value,
        latitude=body.latitude,
        longitude=body.longitude,
        customer_notes=body.customer_notes,
    )
    return _respond(BookingResponse.from_booking(booking).model_dump(mode="json"), request)


@router.get("")
async def list_bookings(
    actor: ActorDep,
    db: DbDep,
    service: ServiceDep,
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: BookingStatus | None = Query(None, description="Filter by BookingStatus"),
) -> ApiResponse:
    items, pagination = await service.list_bookings(
        db, actor, page, limit, status.value if status else None
    )
    data = BookingListResponse(
        items=[BookingResponse.from_booking(b) for b in items], pagination=pagination
    )
    return _respond(data.model_dump(mode="json"), request)


@router.get("/{booking_id}")
async def get_booking(
    booking_id: str, actor: ActorDep, db: DbDep, service: ServiceDep, request: Request
) -> ApiResponse:
    booking = await service.get_booking(db, actor, booking_id)
    return _respond(BookingResponse.from_booking(booking).model_dump(mode="json"), request)


@router.post("/{booking_id}/accept")
async def accept_booking(
    booking_id: str, actor: ActorDep, db: DbDep, service: ServiceDep, request: Request
) -> ApiResponse:
    booking = await service.accept_booking(db, actor, booking_id)
    return _respond(BookingResponse.from_booking(booking).model_dump(mode="json"), request)


@router.post("/{booking_id}/reject")
async def reject_booking(
    booking_id: str,
    body: RejectBookingRequest,
    actor: ActorDep,
    db: DbDep,
    service: ServiceDep,
    request: Request,
) -> ApiResponse:
    booking = await service.reject_booking(db, actor, booking_id, body.reason)
    return _respond(BookingResponse.from_booking(booking).model_dump(mode="json"), request)


@router.post("/{booking_id}/status")
async def advance_status(
    booking_id: str,
    body: AdvanceStatusRequest,
    actor: ActorDep,
    db: DbDep,
    service: ServiceDep,
    request: Request,
) -> ApiResponse:
    booking = await service.advance_status(db, actor, booking_id, body.status.value)
    return _respond(BookingResponse.from_booking(booking).model_dump(mode="json"), request)


@router.post("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: str,
    body: CancelBookingRequest,
    actor: ActorDep,
    db: DbDep,
    service: ServiceDep,
    request: Request,
) -> ApiResponse:
    booking = await service.cancel_booking(db, actor, booking_id, body.reason)
    return _respond(BookingResponse.from_booking(booking).model_dump(mode="json"), request)


@router.post("/{booking_id}/hide")
async def hide_booking(
    booking_id: str, actor: ActorDep, db: DbDep, service: ServiceDep, request: Request
) -> ApiResponse:
    await service.hide_booking(db, actor, booking_id)
    return _respond({"booking_id": booking_id, "hidden": True}, request)
