"""Async engine and session factory for the booking and wallet tables.

Repositories issue raw text() SQL against these sessions; the schema lives in
the Alembic migrations. A session maps to one unit of work: the services
commit a whole transition (booking row, ledger postings) or roll it back, and
the accept-timeout sweeper opens a fresh session per expired booking.
"""
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import settings

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

# Repositories map rows to dataclasses; no ORM instances to expire
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; the service layer owns commit and rollback."""
    async with async_session_factory() as session:
        yield session
