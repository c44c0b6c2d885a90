"""Database session configuration and management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from govflow.core.config import get_settings

settings = get_settings()

database_url = settings.get_database_url(async_mode=True)
is_sqlite = database_url.startswith("sqlite")

if is_sqlite:
    # SQLite configuration (for testing)
    async_engine = create_async_engine(
        database_url,
        poolclass=NullPool,
        echo=settings.debug,
    )
else:
    # PostgreSQL configuration (for production)
    async_engine = create_async_engine(
        database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout,
        pool_pre_ping=True,
        echo=settings.debug,
    )

AsyncSessionLocal = async_sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get asynchronous database session.

    Yields:
        Async database session

    Example:
        ```python
        async def endpoint(db: AsyncSession = Depends(get_async_db)):
            result = await db.execute(select(RfqDocument))
        ```
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def async_session_scope() -> AsyncGenerator[AsyncSession, None]:
    """
    Async context manager for database session.

    Used by scripts and batch jobs that run outside a request.

    Example:
        ```python
        async with async_session_scope() as session:
            await OrderLinkingService(session).link_unlinked_orders()
        ```
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# Alias for FastAPI dependency injection
get_db = get_async_db
