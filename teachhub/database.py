"""Database connection and session management using SQLAlchemy async ORM"""
from datetime import datetime, timezone
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from teachhub.config import DATABASE_URL


def _engine_options(url: str) -> dict:
    """Pool settings for the configured backend"""
    if url.startswith("sqlite"):
        # aiosqlite connections are bound to the loop that opened them
        return {"poolclass": NullPool}

    # pool_size=20: Keep 20 connections alive in the pool
    # max_overflow=30: Allow 30 additional connections under load (total 50 max)
    # pool_recycle=3600: Recycle connections every hour to prevent stale connections
    return {
        "pool_size": 20,
        "max_overflow": 30,
        "pool_recycle": 3600,
        "pool_pre_ping": True,  # Verify connection health before using
    }


# Create async SQLAlchemy engine
engine = create_async_engine(
    DATABASE_URL,
    echo=False,  # Set to True for SQL query logging during development
    **_engine_options(DATABASE_URL),
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for declarative models
Base = declarative_base()


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp used for column defaults"""
    return datetime.now(timezone.utc)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for FastAPI endpoints to get database session.

    Services commit their own units of work; anything left pending when the
    request finishes is committed here, and an exception rolls it back.

    Usage in FastAPI:
        @router.get("/batches")
        async def list_batches(db: AsyncSession = Depends(get_db)):
            ...
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
