from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an async database session.

    The session factory is imported lazily so that test suites overriding this
    dependency never build the production engine.
    """
    from libs.db.config import AsyncSessionLocal

    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
