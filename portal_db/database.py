# This project was developed with assistance from AI tools.
"""Async SQLAlchemy engine, session factory and request-scoped session helper."""

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from .config import db_settings

Base = declarative_base()

engine = create_async_engine(
    db_settings.DATABASE_URL,
    echo=db_settings.SQL_ECHO,
    pool_size=db_settings.DB_POOL_SIZE,
    pool_pre_ping=db_settings.DB_POOL_PRE_PING,
)
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield a session that is closed when the caller is done with it."""
    async with SessionLocal() as session:
        yield session
