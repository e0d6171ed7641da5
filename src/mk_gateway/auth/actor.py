"""The authenticated caller of an engine operation."""

from dataclasses import dataclass
from typing import Any

from src.mk_common.enums import ActorRole, WalletOwnerType
from src.mk_common.errors import InvalidCredentialsError, NotAuthorizedError
from src.mk_wallet.domain.models import WalletOwner


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: ActorRole
    provider_id: str | None = None
    shop_id: str | None = None

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "Actor":
        try:
            role = ActorRole(str(claims.get("role", "")).upper())
        except ValueError:
            raise InvalidCredentialsError() from None
        return cls(
            user_id=str(claims["sub"]),
            role=role,
            provider_id=claims.get("provider_id"),
            shop_id=claims.get("shop_id"),
        )

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    def wallet_owner(self) -> WalletOwner:
        """The wallet this actor operates on: its provider or its shop."""
        if self.role == ActorRole.PROVIDER and self.provider_id:
            return WalletOwner(WalletOwnerType.PROVIDER.value, self.provider_id)
        if self.role == ActorRole.SHOP_OWNER and self.shop_id:
            return WalletOwner(WalletOwnerType.SHOP.value, self.shop_id)
        raise NotAuthorizedError("Only providers and shop owners have wallets")
