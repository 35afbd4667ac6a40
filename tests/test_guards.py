"""
tests.test_guards

Role guard and assignment-required guard decisions, without HTTP.
"""

from __future__ import annotations

import uuid

import pytest

from club_access.api.route_roles import ROUTE_ROLES
from club_access.auth.guards import (
    ASSIGNMENT_REQUIRED_DETAIL,
    RouteRoleTable,
    check_assignment_required,
    check_roles,
)
from club_access.auth.models import Principal, normalize_roles
from club_access.db.models import User
from club_access.errors import Forbidden


def _principal(role: str | list[str], subject: str | None = None) -> Principal:
    roles = normalize_roles(role)
    return Principal(
        subject=subject or str(uuid.uuid4()),
        username="someone",
        role=role if isinstance(role, str) else tuple(sorted(roles)),
        roles=roles,
        token_id="jti",
    )


def test_route_entry_overrides_group_entry() -> None:
    table = RouteRoleTable.build(
        groups={"reports": ["superadmin"]},
        routes={"reports.mine": ["admin"]},
    )
    assert table.required_roles("reports.mine") == frozenset({"admin"})
    assert table.required_roles("reports.all") == frozenset({"superadmin"})
    assert table.required_roles("other.thing") is None
    assert table.required_roles(None) is None


def test_application_table() -> None:
    assert ROUTE_ROLES.required_roles("assignments.create") == frozenset({"superadmin"})
    assert ROUTE_ROLES.required_roles("assignments.admin_modules") == frozenset({"admin"})
    assert ROUTE_ROLES.required_roles("auth.me") is None


@pytest.mark.parametrize(
    ("role", "required", "allowed"),
    [
        ("coach", None, True),
        ("coach", frozenset(), True),
        ("coach", frozenset({"coach", "admin"}), True),
        ("coach", frozenset({"admin"}), False),
        (["coach", "admin"], frozenset({"admin"}), True),
        (["coach", "parent"], frozenset({"superadmin"}), False),
    ],
)
def test_check_roles(role, required, allowed) -> None:
    principal = _principal(role)
    if allowed:
        check_roles(principal, required)
    else:
        with pytest.raises(Forbidden):
            check_roles(principal, required)


@pytest.mark.asyncio
async def test_assignment_guard_ignores_non_admins() -> None:
    async def _never(_: str) -> User | None:
        raise AssertionError("lookup must not run for non-admins")

    await check_assignment_required(_principal("superadmin"), _never)
    await check_assignment_required(_principal("coach"), _never)


@pytest.mark.asyncio
async def test_assignment_guard_allows_assigned_admin() -> None:
    async def _load(_: str) -> User | None:
        return User(role="admin", assignment_id=uuid.uuid4())

    await check_assignment_required(_principal("admin"), _load)


@pytest.mark.asyncio
async def test_assignment_guard_denies_admin_without_assignment() -> None:
    async def _load(_: str) -> User | None:
        return User(role="admin", assignment_id=None)

    with pytest.raises(Forbidden) as exc:
        await check_assignment_required(_principal("admin"), _load)
    assert "no tiene una asignación válida" in exc.value.detail


@pytest.mark.asyncio
async def test_assignment_guard_denies_missing_user() -> None:
    async def _load(_: str) -> User | None:
        return None

    with pytest.raises(Forbidden):
        await check_assignment_required(_principal("admin"), _load)


@pytest.mark.asyncio
async def test_assignment_guard_converts_lookup_errors() -> None:
    async def _load(_: str) -> User | None:
        raise RuntimeError("connection reset")

    with pytest.raises(Forbidden) as exc:
        await check_assignment_required(_principal("admin"), _load)
    assert exc.value.detail == ASSIGNMENT_REQUIRED_DETAIL
