"""
Async SQLAlchemy engine and session factory.

PostgreSQL (asyncpg) in production; SQLite (aiosqlite) is accepted for
local runs and gets foreign keys switched on per connection.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from repopa.core.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    backend = make_url(url).get_backend_name()
    options: dict[str, Any] = {"echo": False}
    if backend == "postgresql":
        options.update(pool_pre_ping=True, pool_size=10, max_overflow=10, pool_recycle=300)
    elif backend == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
    return options


def build_engine(url: str) -> AsyncEngine:
    async_engine = create_async_engine(url, **_engine_options(url))
    if async_engine.dialect.name == "sqlite":

        @event.listens_for(async_engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return async_engine


engine = build_engine(settings.DATABASE_URL)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
