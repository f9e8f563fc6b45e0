"""Database setup helpers (async SQLAlchemy engine/session)."""
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from forecast_api.config import Settings

Base = declarative_base()


def create_db_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine, applying SQLite pragmas on every connection."""
    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        future=True,
        pool_pre_ping=True,
    )

    if settings.is_sqlite:
        busy_timeout = settings.SQLITE_BUSY_TIMEOUT_MS

        @event.listens_for(engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute(f"PRAGMA busy_timeout={busy_timeout}")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory. expire_on_commit=False so rows stay readable after commit."""
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency to provide a DB session per request.

    Closing the session rolls back anything not committed, including
    work interrupted by request cancellation.
    """
    factory: async_sessionmaker = request.app.state.db_session_factory
    async with factory() as session:
        yield session
