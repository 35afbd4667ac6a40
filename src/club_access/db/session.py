"""
club_access.db.session

Async engine and session factory for the credential and assignment store.

Responsibilities:
- Create the async engine from `Settings.database_url`.
- Turn on SQLite foreign-key enforcement so assignment membership rows cascade.
- Create tables directly for dev/test runs.
- Create the async sessionmaker shared by request handlers and the revocation registry.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from club_access.db.base import Base
from club_access.settings import Settings


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(settings: Settings) -> AsyncEngine:
    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        # SQLite ships with FK checks off; ON DELETE CASCADE/SET NULL need them on.
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


async def create_schema(engine: AsyncEngine) -> None:
    # Dev/test only; prod runs Alembic migrations.
    from club_access.db import models  # noqa: F401  # register tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Views are built from ORM rows after commit, so keep attributes loaded.
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


# --- Module Notes -----------------------------------------------------------
# Request handlers get a session per request from `api.deps.db_session`; the
# revocation registry opens its own short sessions from the same factory so a
# revoke commits independently of whatever request triggered it.
