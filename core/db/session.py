from typing import Any, AsyncGenerator, Dict

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from core.config import config


def get_engine_config(database_url: str) -> Dict[str, Any]:
    """Engine keyword arguments for the database backend in ``database_url``.

    PostgreSQL gets a bounded connection pool sized from settings. SQLite
    (local development and the test suite) opens a connection per checkout.
    """
    backend = make_url(database_url).get_backend_name()
    if backend == "sqlite":
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": NullPool,
        }
    return {
        "pool_size": config.DATABASE_POOL_SIZE,
        "max_overflow": config.DATABASE_MAX_OVERFLOW,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


def create_engine_for(database_url: str) -> AsyncEngine:
    """Create the async engine; SQLite connections enforce foreign keys."""
    new_engine = create_async_engine(database_url, **get_engine_config(database_url))

    if make_url(database_url).get_backend_name() == "sqlite":

        @event.listens_for(new_engine.sync_engine, "connect")
        def enable_foreign_keys(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = create_engine_for(config.DATABASE_URL)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session dependency.

    Services take this session in their constructor; model query helpers
    take it as their first argument.
    """
    async with async_session_factory() as session:
        yield session
