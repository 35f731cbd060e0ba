"""Database health check used at application startup."""

import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from poor_jokes.utils.db_session import get_async_engine

logger = logging.getLogger(__name__)


async def test_db_connection(engine: AsyncEngine | None = None) -> bool:
    """
    Test database connection for startup health checks.

    Returns:
        bool: True if connection successful, False otherwise.
    """
    try:
        engine = engine or get_async_engine()
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database health check failed: {e}")
        return False
