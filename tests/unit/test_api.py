"""HTTP-level tests: routers, auth dependencies and the error envelope.

Services run on the in-memory repositories; no database or Redis.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from src.main import app
from src.mk_booking.application.service import get_booking_service
from src.mk_common.database import get_db_session
from src.mk_common.enums import BookingStatus
from src.mk_gateway.auth.actor import Actor
from src.mk_gateway.auth.dependencies import get_current_actor
from src.mk_payout.application.service import PayoutService, get_payout_service
from src.mk_wallet.application.ledger import WalletLedger
from src.mk_wallet.application.service import WalletApplicationService, get_wallet_service
from tests.unit.fakes import FakeSession, InMemoryPayoutRepository, StaticConfigStore
from tests.unit.harness import (
    ADMIN,
    CUSTOMER,
    PROVIDER,
    PROVIDER_WALLET,
    SHOP_PROVIDER,
    SHOP_PROVIDER_WALLET,
    Harness,
)


class _Env:
    def __init__(self) -> None:
        self.h = Harness()
        self.actor: Actor = CUSTOMER
        ledger = WalletLedger(self.h.wallets)
        self.wallet_service = WalletApplicationService(
            ledger, StaticConfigStore(), directory=self.h.directory
        )
        self.payout_service = PayoutService(
            InMemoryPayoutRepository(), ledger, StaticConfigStore(), clock=self.h.clock
        )

    def install(self) -> None:
        app.dependency_overrides[get_db_session] = lambda: FakeSession()
        app.dependency_overrides[get_current_actor] = lambda: self.actor
        app.dependency_overrides[get_booking_service] = lambda: self.h.service
        app.dependency_overrides[get_wallet_service] = lambda: self.wallet_service
        app.dependency_overrides[get_payout_service] = lambda: self.payout_service


@pytest.fixture
def env() -> _Env:
    e = _Env()
    e.install()
    return e


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_unauthenticated_request_rejected(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/bookings")
    assert resp.status_code == 401


async def test_invalid_token_rejected(client: AsyncClient) -> None:
    resp = await client.get(
        "/api/v1/wallet", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert resp.status_code == 401


async def test_upstream_request_id_is_kept(client: AsyncClient, env: _Env) -> None:
    resp = await client.get("/api/v1/bookings/nope", headers={"X-Request-ID": "gw-7f3a"})
    assert resp.headers["X-Request-ID"] == "gw-7f3a"
    assert resp.json()["request_id"] == "gw-7f3a"


async def test_malformed_request_id_is_replaced(client: AsyncClient, env: _Env) -> None:
    resp = await client.get(
        "/api/v1/bookings/nope", headers={"X-Request-ID": "bad id; drop table"}
    )
    assert resp.headers["X-Request-ID"].startswith("req_")
    assert resp.json()["request_id"] == resp.headers["X-Request-ID"]


class TestBookingEndpoints:
    async def test_create_and_accept(self, client: AsyncClient, env: _Env) -> None:
        resp = await client.post(
            "/api/v1/bookings",
            json={
                "provider_id": "prov-1",
                "scheduled_at": (env.h.clock.now + timedelta(hours=30)).isoformat(),
                "service_amount_cents": 100000,
                "travel_fee_cents": 5000,
                "payment_method": "GCASH",
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["code"] == 0
        assert body["request_id"] == resp.headers["X-Request-ID"]
        booking = body["data"]
        assert booking["status"] == "PENDING"
        assert booking["total_amount_cents"] == 105000
        assert booking["total_amount_display"] == "₱1,050.00"

        env.actor = PROVIDER
        resp = await client.post(f"/api/v1/bookings/{booking['id']}/accept")
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "ACCEPTED"

    async def test_invalid_transition_is_409(self, client: AsyncClient, env: _Env) -> None:
        booking = env.h.put(BookingStatus.ACCEPTED.value)
        env.actor = PROVIDER
        resp = await client.post(
            f"/api/v1/bookings/{booking.id}/status", json={"status": "IN_PROGRESS"}
        )
        assert resp.status_code == 409
        body = resp.json()
        assert body["code"] == 3002
        assert body["data"] is None

    async def test_cash_shortfall_envelope(self, client: AsyncClient, env: _Env) -> None:
        env.h.wallets.seed(PROVIDER_WALLET, 3000)
        resp = await client.post(
            "/api/v1/bookings",
            json={
                "provider_id": "prov-1",
                "scheduled_at": (env.h.clock.now + timedelta(hours=30)).isoformat(),
                "service_amount_cents": 100000,
                "payment_method": "CASH",
            },
        )
        assert resp.status_code == 422
        body = resp.json()
        assert body["code"] == 2002
        assert body["data"] == {
            "required": 8000,
            "available": 3000,
            "shortfall": 5000,
            "required_top_up": 5000,
        }

    async def test_missing_booking_is_404(self, client: AsyncClient, env: _Env) -> None:
        resp = await client.get("/api/v1/bookings/nope")
        assert resp.status_code == 404
        assert resp.json()["code"] == 3001

    async def test_list_with_status_filter(self, client: AsyncClient, env: _Env) -> None:
        env.h.put(BookingStatus.PENDING.value)
        env.h.put(BookingStatus.COMPLETED.value)
        resp = await client.get("/api/v1/bookings", params={"status": "COMPLETED"})
        data = resp.json()["data"]
        assert [b["status"] for b in data["items"]] == ["COMPLETED"]
        assert data["pagination"]["total"] == 1


class TestWalletEndpoints:
    async def test_customer_has_no_wallet(self, client: AsyncClient, env: _Env) -> None:
        resp = await client.get("/api/v1/wallet")
        assert resp.status_code == 403

    async def test_top_up_then_balance(self, client: AsyncClient, env: _Env) -> None:
        env.actor = PROVIDER
        resp = await client.post(
            "/api/v1/wallet/top-up", json={"amount_cents": 20000, "payment_method": "GCASH"}
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["new_balance_cents"] == 20000

        resp = await client.get("/api/v1/wallet")
        data = resp.json()["data"]
        assert data["balance_cents"] == 20000
        assert data["balance_display"] == "₱200.00"

    async def test_cash_admission_query(self, client: AsyncClient, env: _Env) -> None:
        env.actor = PROVIDER
        env.h.wallets.seed(PROVIDER_WALLET, 3000)
        resp = await client.get(
            "/api/v1/wallet/cash-admission", params={"service_amount": 100000}
        )
        data = resp.json()["data"]
        assert data["has_enough"] is False
        assert data["required_top_up_cents"] == 5000

    async def test_shop_provider_admission_checks_shop_wallet(
        self, client: AsyncClient, env: _Env
    ) -> None:
        env.h.wallets.seed(SHOP_PROVIDER_WALLET, 10_000_000)
        env.actor = SHOP_PROVIDER
        resp = await client.get(
            "/api/v1/wallet/cash-admission", params={"service_amount": 100000}
        )
        data = resp.json()["data"]
        assert (data["owner_type"], data["owner_id"]) == ("SHOP", "shop-1")
        assert data["has_enough"] is False
        assert data["required_top_up_cents"] == 8000

        # The booking it predicts is refused for the same reason
        env.actor = CUSTOMER
        resp = await client.post(
            "/api/v1/bookings",
            json={
                "provider_id": "prov-2",
                "scheduled_at": (env.h.clock.now + timedelta(hours=30)).isoformat(),
                "service_amount_cents": 100000,
                "payment_method": "CASH",
            },
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 2002


class TestPayoutEndpoints:
    async def test_request_and_admin_reject(self, client: AsyncClient, env: _Env) -> None:
        env.actor = PROVIDER
        env.h.wallets.seed(PROVIDER_WALLET, 100000)
        resp = await client.post(
            "/api/v1/payouts",
            json={"amount_cents": 60000, "method": "GCASH", "account_info": "09171234567"},
        )
        assert resp.status_code == 200
        payout_id = resp.json()["data"]["id"]
        assert env.h.wallets.balance(PROVIDER_WALLET) == 40000

        env.actor = ADMIN
        resp = await client.post(
            f"/api/v1/admin/payouts/{payout_id}/reject", json={"reason": "name mismatch"}
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "REJECTED"
        assert env.h.wallets.balance(PROVIDER_WALLET) == 100000

    async def test_admin_routes_require_admin(self, client: AsyncClient, env: _Env) -> None:
        env.actor = PROVIDER
        resp = await client.get("/api/v1/admin/payouts")
        assert resp.status_code == 403
        assert resp.json()["code"] == 1002


class TestAdminBookingCancel:
    async def test_full_refund(self, client: AsyncClient, env: _Env) -> None:
        booking = env.h.put(BookingStatus.IN_PROGRESS.value)
        env.actor = ADMIN
        resp = await client.post(
            f"/api/v1/admin/bookings/{booking.id}/cancel", json={"reason": "dispute"}
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["status"] == "CANCELLED"
        assert data["refund_percentage"] == 100
