"""mk_wallet REST API - provider / shop-owner wallet endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.database import get_db_session
from src.mk_common.enums import WalletTransactionType
from src.mk_common.response import ApiResponse, success_response
from src.mk_gateway.auth.actor import Actor
from src.mk_gateway.auth.dependencies import get_current_actor
from src.mk_wallet.application.schemas import TopUpRequest
from src.mk_wallet.application.service import WalletApplicationService, get_wallet_service

router = APIRouter(prefix="/wallet", tags=["wallet"])

ServiceDep = Annotated[WalletApplicationService, Depends(get_wallet_service)]


def _with_request_id(resp: ApiResponse, request: Request) -> ApiResponse:
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def get_wallet(
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: ServiceDep,
    request: Request,
) -> ApiResponse:
    data = await service.get_balance(db, actor.wallet_owner())
    return _with_request_id(success_response(data.model_dump()), request)


@router.get("/transactions")
async def list_transactions(
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: ServiceDep,
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    tx_type: WalletTransactionType | None = Query(None, alias="type"),
) -> ApiResponse:
    data = await service.list_transactions(
        db, actor.wallet_owner(), page, limit, tx_type.value if tx_type else None
    )
    return _with_request_id(success_response(data.model_dump(mode="json")), request)


@router.post("/top-up")
async def top_up(
    body: TopUpRequest,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: ServiceDep,
    request: Request,
) -> ApiResponse:
    data = await service.top_up(
        db, actor.wallet_owner(), body.amount_cents, body.payment_method.value, body.payment_ref
    )
    return _with_request_id(success_response(data.model_dump(mode="json")), request)


@router.get("/cash-admission")
async def cash_admission(
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: ServiceDep,
    request: Request,
    service_amount: int = Query(..., gt=0, description="Service amount in centavos"),
) -> ApiResponse:
    data = await service.check_cash_admission(db, actor, service_amount)
    return _with_request_id(success_response(data.model_dump()), request)


@router.get("/fee-quote")
async def fee_quote(
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: ServiceDep,
    request: Request,
    amount: int = Query(..., gt=0, description="Service amount in centavos"),
) -> ApiResponse:
    _ = actor
    data = await service.fee_quote(db, amount)
    return _with_request_id(success_response(data.model_dump()), request)
