"""Repository Protocol - dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the PostgreSQL implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_wallet.domain.models import Wallet, WalletOwner, WalletTransaction


class WalletRepositoryProtocol(Protocol):
    async def ensure_wallet(self, db: AsyncSession, owner: WalletOwner) -> None: ...

    async def get_wallet(self, db: AsyncSession, owner: WalletOwner) -> Wallet | None: ...

    async def apply_delta(
        self,
        db: AsyncSession,
        owner: WalletOwner,
        delta: int,
        earning: int,
        allow_negative: bool,
    ) -> Wallet | None:
        """Atomically add delta to the balance; None if the row is missing or would overdraw."""
        ...

    async def insert_transaction(
        self, db: AsyncSession, tx: WalletTransaction
    ) -> WalletTransaction: ...

    async def list_transactions(
        self,
        db: AsyncSession,
        owner: WalletOwner,
        offset: int,
        limit: int,
        tx_type: str | None,
    ) -> list[WalletTransaction]: ...

    async def count_transactions(
        self, db: AsyncSession, owner: WalletOwner, tx_type: str | None
    ) -> int: ...
