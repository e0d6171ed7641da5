"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.mk_admin.api.router import router as admin_router
from src.mk_booking.api.router import router as booking_router
from src.mk_booking.application.service import get_booking_service
from src.mk_booking.application.sweeper import AcceptTimeoutSweeper
from src.mk_common.database import engine
from src.mk_common.errors import (
    AppError,
    InsufficientBalanceError,
    InsufficientWalletBalanceError,
)
from src.mk_common.redis_client import close_redis, get_redis
from src.mk_common.response import error_response
from src.mk_gateway.middleware.request_log import RequestLogMiddleware
from src.mk_payout.api.router import router as payout_router
from src.mk_wallet.api.router import router as wallet_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis, start the accept-timeout sweeper. Shutdown: stop and dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    sweeper = AcceptTimeoutSweeper(get_booking_service())
    sweeper_task = asyncio.create_task(sweeper.run_forever(), name="accept-timeout-sweeper")
    yield
    # Shutdown
    sweeper_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper_task
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


def _error_data(exc: AppError) -> dict[str, Any] | None:
    if isinstance(exc, InsufficientWalletBalanceError):
        return {
            "required": exc.required,
            "available": exc.available,
            "shortfall": exc.shortfall,
            "required_top_up": exc.required_top_up,
        }
    if isinstance(exc, InsufficientBalanceError):
        return {"required": exc.required, "available": exc.available, "shortfall": exc.shortfall}
    return None


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("AppError %d on %s: %s", exc.code, request.url.path, exc.message)
    resp = error_response(exc.code, exc.message, _error_data(exc))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(booking_router, prefix="/api/v1")
app.include_router(wallet_router, prefix="/api/v1")
app.include_router(payout_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
