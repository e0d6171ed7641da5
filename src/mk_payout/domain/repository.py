"""PayoutRepository Protocol - interface contract for persistence layer."""
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_payout.domain.models import Payout
from src.mk_wallet.domain.models import WalletOwner


class PayoutRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, payout: Payout) -> Payout: ...

    async def get_by_id(self, db: AsyncSession, payout_id: str) -> Payout | None: ...

    async def transition(
        self,
        db: AsyncSession,
        payout_id: str,
        expected: str,
        target: str,
        now: datetime,
        fields: dict[str, Any] | None = None,
    ) -> Payout | None:
        """UPDATE ... WHERE status = expected; None when the payout already moved."""
        ...

    async def list_by_owner(
        self, db: AsyncSession, owner: WalletOwner, offset: int, limit: int
    ) -> list[Payout]: ...

    async def count_by_owner(self, db: AsyncSession, owner: WalletOwner) -> int: ...

    async def list_by_status(
        self, db: AsyncSession, status: str | None, offset: int, limit: int
    ) -> list[Payout]: ...

    async def count_by_status(self, db: AsyncSession, status: str | None) -> int: ...
