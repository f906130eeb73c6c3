"""
Database session management with SQLAlchemy async
"""

from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from core.config import settings
import logging

logger = logging.getLogger(__name__)


def create_session_factory(
    database_url: Optional[str] = None,
    echo: bool = False
) -> Tuple[AsyncEngine, async_sessionmaker]:
    """
    Create the async engine and its session factory.

    The engine's connection pool is shared by every write of a run; the
    caller owns the engine and must dispose of it on shutdown.
    """
    url = database_url or settings.DATABASE_URL
    engine = create_async_engine(url, echo=echo, future=True)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )

    logger.debug(f"Database engine created for {url.split('@')[-1]}")
    return engine, session_factory
