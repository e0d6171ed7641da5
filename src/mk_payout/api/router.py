"""mk_payout REST API - payout requests and history for providers and shop owners."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.database import get_db_session
from src.mk_common.response import ApiResponse, success_response
from src.mk_gateway.auth.actor import Actor
from src.mk_gateway.auth.dependencies import get_current_actor
from src.mk_payout.application.schemas import PayoutListResponse, PayoutRequest, PayoutResponse
from src.mk_payout.application.service import PayoutService, get_payout_service

router = APIRouter(prefix="/payouts", tags=["payouts"])


@router.post("")
async def request_payout(
    body: PayoutRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[PayoutService, Depends(get_payout_service)],
    request: Request,
) -> ApiResponse:
    payout = await service.request_payout(
        db, actor.wallet_owner(), body.amount_cents, body.method.value, body.account_info
    )
    resp = success_response(PayoutResponse.from_payout(payout).model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def get_payout_history(
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[PayoutService, Depends(get_payout_service)],
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    items, pagination = await service.get_payout_history(db, actor.wallet_owner(), page, limit)
    data = PayoutListResponse(
        items=[PayoutResponse.from_payout(p) for p in items], pagination=pagination
    )
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
