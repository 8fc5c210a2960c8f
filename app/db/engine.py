# =============================================================================
# Database Engine & Session Management
# =============================================================================
#
# One async engine (asyncpg) per process, one AsyncSession per request.
#
#   create_schema()      → startup: CREATE TABLE IF NOT EXISTS
#   get_async_session()  → FastAPI dependency, commit on success,
#                          rollback on error
#   dispose_engine()     → shutdown: close pooled connections
#
# EvaluationRepository commits right after an insert so that the
# server-generated created_at can be refreshed into the row before the
# response is built. The commit at the end of the request is then a no-op.
# =============================================================================

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings
from app.db.models import Base

# pool_pre_ping: connections dropped by the server between requests are
# replaced instead of failing the next query
async_engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=5,
    max_overflow=10,
    pool_pre_ping=True,
)

# expire_on_commit=False: rows stay readable after commit without an
# implicit (and, in async code, illegal) lazy reload
async_session_factory = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def create_schema() -> None:
    """Create missing tables. Existing tables are left untouched."""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    await async_engine.dispose()


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
