"""Unit tests for JWT verification and Actor claims."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from config.settings import settings
from src.mk_common.enums import ActorRole
from src.mk_common.errors import InvalidCredentialsError, NotAuthorizedError
from src.mk_gateway.auth.actor import Actor
from src.mk_gateway.auth.jwt_handler import decode_access_token


def _token(secret: str | None = None, **claims: object) -> str:
    payload = {
        "sub": "user-123",
        "type": "access",
        "role": "PROVIDER",
        "provider_id": "prov-1",
        "exp": datetime.now(UTC) + timedelta(minutes=5),
    }
    payload.update(claims)
    return jwt.encode(payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def test_decode_valid_access_token() -> None:
    payload = decode_access_token(_token())
    assert payload["sub"] == "user-123"
    assert payload["provider_id"] == "prov-1"


def test_refresh_token_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_access_token(_token(type="refresh"))


def test_wrong_secret_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_access_token(_token(secret="not-the-secret"))


def test_expired_token_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_access_token(_token(exp=datetime.now(UTC) - timedelta(seconds=1)))


def test_missing_subject_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_access_token(_token(sub=""))


class TestActor:
    def test_from_claims(self) -> None:
        actor = Actor.from_claims(decode_access_token(_token()))
        assert actor == Actor(user_id="user-123", role=ActorRole.PROVIDER, provider_id="prov-1")

    def test_role_is_case_insensitive(self) -> None:
        assert Actor.from_claims({"sub": "u", "role": "admin"}).is_admin

    def test_unknown_role(self) -> None:
        with pytest.raises(InvalidCredentialsError):
            Actor.from_claims({"sub": "u", "role": "SUPERUSER"})

    def test_wallet_owner(self) -> None:
        provider = Actor("u1", ActorRole.PROVIDER, provider_id="prov-1")
        shop = Actor("u2", ActorRole.SHOP_OWNER, shop_id="shop-1")
        assert (provider.wallet_owner().owner_type, provider.wallet_owner().owner_id) == (
            "PROVIDER",
            "prov-1",
        )
        assert shop.wallet_owner().owner_type == "SHOP"

    def test_customer_has_no_wallet(self) -> None:
        with pytest.raises(NotAuthorizedError):
            Actor("u3", ActorRole.CUSTOMER).wallet_owner()
