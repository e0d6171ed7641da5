"""ProviderDirectory - read-only view of the providers table (owned by the catalog service)."""
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_booking.domain.models import ProviderRef

_GET_PROVIDER_SQL = text("""
    SELECT id, user_id, shop_id, status
    FROM providers WHERE id = :id
""")


class ProviderDirectory:
    async def get_provider(self, db: AsyncSession, provider_id: str) -> ProviderRef | None:
        row = (await db.execute(_GET_PROVIDER_SQL, {"id": provider_id})).fetchone()
        if row is None:
            return None
        return ProviderRef(
            id=row.id, user_id=row.user_id, shop_id=row.shop_id, status=row.status
        )
