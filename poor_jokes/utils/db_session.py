from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession
from typing import AsyncGenerator, Optional
from functools import lru_cache
from contextlib import asynccontextmanager

from poor_jokes.config.settings import settings

@lru_cache
def get_async_engine() -> AsyncEngine:
    """Returns a cached instance of the async engine."""
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_recycle=3600,
    )

@lru_cache
def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """Returns a cached instance of the async session factory."""
    return build_session_factory(get_async_engine())

def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Builds a session factory for an arbitrary engine (used by tests and scripts)."""
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
        class_=AsyncSession,
    )

@asynccontextmanager
async def get_db_session_context_manager(
    existing_session: Optional[AsyncSession] = None,
    factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provides an SQLAlchemy async session within an asynchronous context manager.

    If an `existing_session` is provided, it yields that session and the caller
    is responsible for its lifecycle (commit, rollback, close).
    Otherwise, it creates a new session from `factory` (or the cached default factory),
    and ensures it is committed on successful exit, rolled back on error, and closed regardless.
    """
    if existing_session is not None:
        yield existing_session
        return

    factory = factory or get_async_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
