"""
Database Connection Module
Handles the relational store connection using SQLAlchemy async engine.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from restaurant_ops.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

engine_options = {"echo": settings.database_echo}
if not settings.is_sqlite:
    engine_options.update(
        pool_size=settings.db_pool_size,  # Connection pool size
        max_overflow=settings.db_max_overflow,  # Extra connections when pool is full
    )

# Create async engine
engine = create_async_engine(settings.database_url, **engine_options)

# Session factory - creates new database sessions
async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False  # Objects remain accessible after commit
)


# Base class for all our models
class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    """
    Dependency injection for FastAPI routes.
    Yields a database session and ensures cleanup.
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """
    Create all tables in database.
    Called once at application startup.
    """
    # Register models on Base.metadata before create_all
    from restaurant_ops import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created successfully")


async def check_db(session: AsyncSession) -> bool:
    """Round-trip a trivial statement; used by the health check."""
    try:
        await session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
