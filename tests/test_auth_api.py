"""
tests.test_auth_api

Login, document login, register and logout over HTTP.
"""

from __future__ import annotations

import time

import httpx
import jwt
import pytest

from club_access.services.auth_service import INVALID_CREDENTIALS, ROLE_MISMATCH
from tests.conftest import PASSWORD, MakeUser, Sessions, bearer


@pytest.mark.asyncio
async def test_coach_login_returns_sixty_minute_token(
    client: httpx.AsyncClient, app_sessions: Sessions, make_user: MakeUser
) -> None:
    coach = await make_user(app_sessions, role="coach", username="coach1", name="Ana")

    before = int(time.time())
    r = await client.post("/auth/login", json={"username": "coach1", "password": PASSWORD})

    assert r.status_code == 200
    access = r.json()["access"]
    claims = jwt.decode(access["authorization"], options={"verify_signature": False})
    assert claims["role"] == "coach"
    assert claims["sub"] == str(coach.id)
    assert claims["username"] == "coach1"
    assert claims["jti"]
    assert before + 3600 - 5 <= claims["exp"] <= int(time.time()) + 3600 + 5
    assert access["user"] == {
        "id": str(coach.id),
        "name": "Ana",
        "lastname": None,
        "role": "coach",
        "assignment_id": None,
    }


@pytest.mark.asyncio
async def test_login_rejects_bad_credentials(
    client: httpx.AsyncClient, app_sessions: Sessions, make_user: MakeUser
) -> None:
    await make_user(app_sessions, role="coach", username="coach1")

    wrong = await client.post("/auth/login", json={"username": "coach1", "password": "nope"})
    unknown = await client.post("/auth/login", json={"username": "ghost", "password": PASSWORD})

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["detail"] == unknown.json()["detail"] == INVALID_CREDENTIALS
    assert wrong.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_login_rejects_user_without_password_hash(
    client: httpx.AsyncClient, app_sessions: Sessions, make_user: MakeUser
) -> None:
    await make_user(app_sessions, role="assistant", username="nohash", password=None)
    r = await client.post("/auth/login", json={"username": "nohash", "password": "anything"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_document_only_roles_cannot_use_password_login(
    client: httpx.AsyncClient, app_sessions: Sessions, make_user: MakeUser
) -> None:
    await make_user(app_sessions, role="athlete", username="runner", ci="1234567")
    r = await client.post("/auth/login", json={"username": "runner", "password": PASSWORD})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_login_by_document(
    client: httpx.AsyncClient, app_sessions: Sessions, make_user: MakeUser
) -> None:
    athlete = await make_user(app_sessions, role="athlete", ci="7654321", password=None)

    r = await client.post("/auth/login-by-document", json={"document": "7654321"})

    assert r.status_code == 200
    claims = jwt.decode(
        r.json()["access"]["authorization"], options={"verify_signature": False}
    )
    assert claims["sub"] == str(athlete.id)
    assert claims["role"] == "athlete"
    assert claims["ci"] == "7654321"

    me = await client.get("/auth/me", headers=bearer(r.json()["access"]["authorization"]))
    assert me.json() == {"sub": str(athlete.id), "username": None, "role": "athlete", "ci": "7654321"}


@pytest.mark.asyncio
async def test_login_by_document_prefers_hinted_role(
    client: httpx.AsyncClient, app_sessions: Sessions, make_user: MakeUser
) -> None:
    await make_user(app_sessions, role="athlete", ci="555", password=None)
    parent = await make_user(app_sessions, role="parent", ci="555", password=None)

    r = await client.post("/auth/login-by-document", json={"document": "555", "role": "parent"})

    assert r.status_code == 200
    assert r.json()["access"]["user"]["id"] == str(parent.id)


@pytest.mark.asyncio
async def test_login_by_document_role_mismatch(
    client: httpx.AsyncClient, app_sessions: Sessions, make_user: MakeUser
) -> None:
    await make_user(app_sessions, role="athlete", ci="999", password=None)

    r = await client.post("/auth/login-by-document", json={"document": "999", "role": "parent"})

    assert r.status_code == 401
    assert r.json()["detail"] == ROLE_MISMATCH


@pytest.mark.asyncio
async def test_login_by_document_matches_multi_role_record(
    client: httpx.AsyncClient, app_sessions: Sessions, make_user: MakeUser
) -> None:
    # A coach who is also a parent keeps the legacy `role` column as "coach".
    user = await make_user(
        app_sessions, role="coach", username="coachdad", roles=["coach", "parent"], ci="777"
    )

    hinted = await client.post("/auth/login-by-document", json={"document": "777", "role": "parent"})
    unhinted = await client.post("/auth/login-by-document", json={"document": "777"})

    assert hinted.status_code == unhinted.status_code == 200
    for r in (hinted, unhinted):
        access = r.json()["access"]
        claims = jwt.decode(access["authorization"], options={"verify_signature": False})
        assert claims["sub"] == str(user.id)
        assert claims["role"] == "parent"
        assert access["user"]["role"] == "parent"


@pytest.mark.asyncio
async def test_login_by_document_unknown_or_staff_document(
    client: httpx.AsyncClient, app_sessions: Sessions, make_user: MakeUser
) -> None:
    # Staff share the ci column but never authenticate through it.
    await make_user(app_sessions, role="coach", username="c", ci="111")

    assert (await client.post("/auth/login-by-document", json={"document": "000"})).status_code == 401
    assert (await client.post("/auth/login-by-document", json={"document": "111"})).status_code == 401


@pytest.mark.asyncio
async def test_register_creates_superadmin(client: httpx.AsyncClient, login) -> None:
    r = await client.post(
        "/auth/register", json={"username": "root", "password": "s3cret-pass", "roles": ["coach"]}
    )

    assert r.status_code == 201
    body = r.json()
    assert body["username"] == "root"
    assert body["role"] == "superadmin"
    assert "password" not in body and "password_hash" not in body

    token = await login("root", "s3cret-pass")
    me = await client.get("/auth/me", headers=bearer(token))
    assert me.json()["role"] == "superadmin"


@pytest.mark.asyncio
async def test_register_rejects_taken_or_missing(client: httpx.AsyncClient) -> None:
    first = await client.post("/auth/register", json={"username": "root", "password": "pw-123456"})
    dup = await client.post("/auth/register", json={"username": "root", "password": "pw-123456"})
    missing = await client.post("/auth/register", json={"username": "other"})

    assert first.status_code == 201
    assert dup.status_code == 409
    assert missing.status_code == 400


@pytest.mark.asyncio
async def test_logout_revokes_token(
    client: httpx.AsyncClient, app_sessions: Sessions, make_user: MakeUser, login
) -> None:
    await make_user(app_sessions, role="coach", username="coach1")
    token = await login("coach1")
    assert (await client.get("/auth/me", headers=bearer(token))).status_code == 200

    first = await client.post("/auth/logout", headers=bearer(token))
    second = await client.post("/auth/logout", headers=bearer(token))
    after = await client.get("/auth/me", headers=bearer(token))

    assert first.status_code == second.status_code == 204
    assert after.status_code == 401
    assert after.json()["detail"] == "Token revoked"


@pytest.mark.asyncio
async def test_logout_only_revokes_that_token(
    client: httpx.AsyncClient, app_sessions: Sessions, make_user: MakeUser, login
) -> None:
    await make_user(app_sessions, role="coach", username="coach1")
    phone = await login("coach1")
    laptop = await login("coach1")

    await client.post("/auth/logout", headers=bearer(phone))

    assert (await client.get("/auth/me", headers=bearer(laptop))).status_code == 200


@pytest.mark.asyncio
async def test_logout_without_or_with_garbage_token(client: httpx.AsyncClient) -> None:
    assert (await client.post("/auth/logout")).status_code == 204
    assert (await client.post("/auth/logout", headers=bearer("not-a-jwt"))).status_code == 204


@pytest.mark.asyncio
async def test_me_requires_token(client: httpx.AsyncClient) -> None:
    assert (await client.get("/auth/me")).status_code == 401
    assert (await client.get("/auth/me", headers=bearer("garbage"))).status_code == 401
