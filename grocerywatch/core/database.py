"""Database configuration and session management."""

import logging
import typing as t

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from grocerywatch.core.config import SETTINGS

LOGGER: logging.Logger = logging.getLogger(__name__)


class Base(DeclarativeBase):  # pylint: disable=too-few-public-methods
    """Base class for all database models."""


def build_session_maker(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create the session factory used across the application.

    Args:
        engine (AsyncEngine): The engine sessions are bound to.

    Returns:
        async_sessionmaker[AsyncSession]: The session factory.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Create async engine
ENGINE: AsyncEngine = create_async_engine(
    SETTINGS.database_url,
    echo=SETTINGS.debug,
    future=True,
)

# Create async session factory
ASYNC_SESSION_MAKER: async_sessionmaker[AsyncSession] = build_session_maker(
    ENGINE
)


async def get_db() -> t.AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session.

    Yields:
        AsyncSession: An asynchronous database session.
    """
    async with ASYNC_SESSION_MAKER() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(engine: AsyncEngine = ENGINE) -> None:
    """Initialize database tables.

    Args:
        engine (AsyncEngine): The engine to create tables on.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine = ENGINE) -> None:
    """Close database connection.

    Args:
        engine (AsyncEngine): The engine to dispose.
    """
    await engine.dispose()
