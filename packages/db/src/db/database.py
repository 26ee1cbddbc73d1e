# This project was developed with assistance from AI tools.
"""Async SQLAlchemy engine, session factory and FastAPI session dependency."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import db_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


engine = create_async_engine(
    db_settings.DATABASE_URL,
    echo=db_settings.SQL_ECHO,
    pool_pre_ping=True,
)

SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped session."""
    async with SessionLocal() as session:
        yield session


class DatabaseService:
    """Connectivity probe used by the health endpoint."""

    def __init__(self, session_factory: async_sessionmaker = SessionLocal):
        self._session_factory = session_factory

    async def health_check(self) -> dict:
        try:
            async with self._session_factory() as session:
                result = await session.execute(text("SELECT version()"))
                version = result.scalar() or ""
            return {
                "name": "Database",
                "status": "healthy",
                "message": version.split(" on ")[0],
            }
        except Exception as exc:
            logger.warning("Database health check failed: %s", exc)
            return {
                "name": "Database",
                "status": "unhealthy",
                "message": str(exc),
            }


def get_db_service() -> DatabaseService:
    return DatabaseService()
