from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings

engine = create_async_engine(
    settings.async_database_url,
    echo=settings.DB_ECHO_LOG,
    pool_pre_ping=True,
)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Create tables for local development; production uses migrations."""
    from db.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
