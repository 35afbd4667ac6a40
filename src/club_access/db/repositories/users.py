"""
club_access.db.repositories.users

Repository for `User` entities (the credential store).

Responsibilities:
- Look users up by id, username and identity document.
- Create credential records.
- Bulk-maintain the `assignment_id` back-reference for admins.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from club_access.db.models import User


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: uuid.UUID) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def find_by_ci(self, ci: str) -> list[User]:
        # Role filtering happens on `User.role_set`, which spans `role` and `roles`.
        stmt = select(User).where(User.ci == ci).order_by(User.created_at)
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_by_ids(self, user_ids: Iterable[uuid.UUID]) -> list[User]:
        ids = list(user_ids)
        if not ids:
            return []
        stmt = select(User).where(User.id.in_(ids))
        return list((await self._session.execute(stmt)).scalars().all())

    async def create(
        self,
        *,
        role: str,
        username: str | None = None,
        password_hash: str | None = None,
        roles: list[str] | None = None,
        name: str | None = None,
        lastname: str | None = None,
        ci: str | None = None,
    ) -> User:
        user = User(
            username=username,
            password_hash=password_hash,
            role=role,
            roles=roles,
            name=name,
            lastname=lastname,
            ci=ci,
            assignment_id=None,
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def set_assignment(
        self, user_ids: Iterable[uuid.UUID], assignment_id: uuid.UUID
    ) -> None:
        ids = list(user_ids)
        if not ids:
            return
        await self._session.execute(
            update(User)
            .where(User.id.in_(ids))
            .values(assignment_id=assignment_id)
            .execution_options(synchronize_session="fetch")
        )

    async def clear_assignment(
        self, user_ids: Iterable[uuid.UUID], *, assignment_id: uuid.UUID
    ) -> None:
        # Only clear references that still point at this assignment.
        ids = list(user_ids)
        if not ids:
            return
        await self._session.execute(
            update(User)
            .where(User.id.in_(ids), User.assignment_id == assignment_id)
            .values(assignment_id=None)
            .execution_options(synchronize_session="fetch")
        )

    async def clear_all_for_assignment(self, assignment_id: uuid.UUID) -> None:
        await self._session.execute(
            update(User)
            .where(User.assignment_id == assignment_id)
            .values(assignment_id=None)
            .execution_options(synchronize_session="fetch")
        )


# --- Module Notes -----------------------------------------------------------
# Back-reference writes are never committed here; `AssignmentService` commits them
# together with the assignment row.
