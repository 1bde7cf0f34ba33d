from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import async_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; the publisher commits its own writes."""
    async with async_session() as session:
        yield session
