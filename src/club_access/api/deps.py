"""
club_access.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for the auth container and DB sessions.
- Encapsulate app.state access patterns (container/sessionmaker).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from club_access.container import AuthContainer


def container_dep(request: Request) -> AuthContainer:
    # Built on app startup in `club_access.api.app.create_app`.
    return request.app.state.container  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session
