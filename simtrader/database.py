"""
Database engine and sessions for SimTrader.

Order execution commits once per request and relies on rollback of the
whole unit on failure, so any backend used here must be transactional.
SQLite (aiosqlite) is the default; set DATABASE_URL for another async
driver.
"""

import os
from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./simtrader.db")

# Seconds a SQLite connection waits on a locked database file
SQLITE_BUSY_TIMEOUT = float(os.getenv("SQLITE_BUSY_TIMEOUT", "30"))


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""


def make_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; file-backed SQLite gets a busy timeout."""
    connect_args = {}
    if url.startswith("sqlite") and ":memory:" not in url:
        connect_args["timeout"] = SQLITE_BUSY_TIMEOUT
    return create_async_engine(url, echo=echo, connect_args=connect_args)


def make_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Objects stay readable after commit; routers serialize them post-commit
    return async_sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False)


async def create_tables(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# SQLALCHEMY_ECHO=1 logs every statement
engine = make_engine(DATABASE_URL, echo=os.getenv("SQLALCHEMY_ECHO") == "1")
AsyncSessionLocal = make_sessionmaker(engine)


async def init_db() -> None:
    """Create all tables on startup (no migrations)."""
    await create_tables(engine)


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding one session per request."""
    async with AsyncSessionLocal() as session:
        yield session
