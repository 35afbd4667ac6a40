"""
tests.conftest

Shared fixtures: per-test SQLite database, app lifecycle, HTTP client, seed helpers.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from club_access.api.app import create_app
from club_access.auth.passwords import hash_password
from club_access.db.models import User
from club_access.db.repositories.users import UserRepo
from club_access.db.session import create_engine, create_schema, create_sessionmaker
from club_access.settings import Settings

Sessions = async_sessionmaker[AsyncSession]
MakeUser = Callable[..., Awaitable[User]]

PASSWORD = "correct horse battery"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        log_level="WARNING",
        jwt_secret="test-secret-with-enough-entropy-0123456789",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'club.db'}",
        revocation_cleanup_interval_seconds=0,
    )


@pytest_asyncio.fixture
async def sessions(settings: Settings) -> AsyncIterator[Sessions]:
    # Standalone engine for service-level tests (no HTTP app).
    engine = create_engine(settings)
    await create_schema(engine)
    try:
        yield create_sessionmaker(engine)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not run lifespan; drive it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest.fixture
def app_sessions(app: FastAPI) -> Sessions:
    return app.state.sessionmaker


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def make_user(settings: Settings) -> MakeUser:
    async def _make(
        sessions: Sessions,
        *,
        role: str,
        username: str | None = None,
        password: str | None = PASSWORD,
        roles: list[str] | None = None,
        ci: str | None = None,
        name: str | None = None,
    ) -> User:
        async with sessions() as session:
            user = await UserRepo(session).create(
                role=role,
                username=username,
                password_hash=(
                    hash_password(password, rounds=settings.bcrypt_rounds) if password else None
                ),
                roles=roles,
                ci=ci,
                name=name or (username or role).title(),
            )
            await session.commit()
            return user

    return _make


@pytest.fixture
def login(client: httpx.AsyncClient) -> Callable[..., Awaitable[str]]:
    async def _login(username: str, password: str = PASSWORD) -> str:
        r = await client.post("/auth/login", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        return r.json()["access"]["authorization"]

    return _login


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def assignment_ref(sessions: Sessions, user_id: uuid.UUID) -> uuid.UUID | None:
    # Fresh session so the value comes from the database, not an identity map.
    async with sessions() as session:
        user = await UserRepo(session).get(user_id)
        assert user is not None
        return user.assignment_id
