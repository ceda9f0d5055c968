"""
IdeaHub – Async SQLAlchemy engine, session, and declarative base.

The engine is not a module global: the application lifespan builds it,
keeps it on ``app.state`` and disposes it on shutdown.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from ideahub.config import settings
from ideahub.errors import StoreError

logger = logging.getLogger(__name__)


# ── Declarative base ──
class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ── Engine ──
def build_engine(url: str) -> AsyncEngine:
    engine_kwargs = {
        "echo": settings.SQL_ECHO,
        "future": True,
    }

    # If using PostgreSQL behind PgBouncer (transaction mode), disable
    # prepared statement caching.
    if "postgresql" in url:
        engine_kwargs["connect_args"] = {"statement_cache_size": 0}

    engine = create_async_engine(url, **engine_kwargs)
    if url.startswith("sqlite"):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


# ── Session factory ──
def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    # Import for side effects: registers every table on Base.metadata.
    import ideahub.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Dependency for FastAPI routes ──
async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an async database session, rolled back on error and always closed."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# ── Write helpers ──
async def persist(db: AsyncSession, *objects) -> None:
    """Add ``objects`` to the session and flush them in one round trip."""
    db.add_all(objects)
    await flush(db)


async def flush(db: AsyncSession) -> None:
    try:
        await db.flush()
    except SQLAlchemyError as exc:
        logger.exception("Flush failed")
        raise StoreError() from exc


async def commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        logger.exception("Commit failed")
        await db.rollback()
        raise StoreError() from exc


# ── Column defaults ──
def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
