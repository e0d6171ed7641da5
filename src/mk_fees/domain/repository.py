"""ConfigStore Protocol - the engine reads configuration, it never writes it."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_fees.domain.policy import EngineConfig


class ConfigStoreProtocol(Protocol):
    async def load(self, db: AsyncSession) -> EngineConfig: ...
