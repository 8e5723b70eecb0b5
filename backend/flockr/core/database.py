"""
Database configuration and session management

The engine is owned by a Database object created at application startup and
disposed at shutdown. Connection pooling is configured for Postgres only;
SQLite (used in tests) keeps SQLAlchemy's defaults.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from flockr.core.config import Settings


Base = declarative_base()


def _pool_config(settings: Settings) -> dict:
    if settings.DATABASE_URL.startswith("sqlite"):
        return {}
    if settings.ENVIRONMENT == "production":
        return {
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_recycle": settings.DB_POOL_RECYCLE,
            "pool_pre_ping": True,
        }
    return {
        "pool_size": 2,
        "max_overflow": 5,
        "pool_pre_ping": True,
    }


class Database:
    """Owns the async engine and session factory for one application."""

    def __init__(self, url: str, engine: Optional[AsyncEngine] = None, **engine_kwargs):
        self.url = url
        self.engine = engine or create_async_engine(url, future=True, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.DATABASE_URL, echo=settings.DEBUG, **_pool_config(settings))

    async def create_all(self) -> None:
        """Create tables for all registered models."""
        import flockr.models  # noqa: F401 - registers models on Base.metadata

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Transactional session scope: commits on success, rolls back on error.

        Usage:
            async with database.session() as db:
                db.add(obj)
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Dependency for getting async database sessions"""
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
