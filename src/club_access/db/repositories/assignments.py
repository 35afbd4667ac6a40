"""
club_access.db.repositories.assignments

Repository for `Assignment` entities.

Responsibilities:
- Create, fetch, update and delete module assignments.
- Membership queries over the `assignment_admins` association.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy import and_, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from club_access.db.models import Assignment, User, assignment_admins


class AssignmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        module_name: str,
        admins: Sequence[User],
        assigned_by: uuid.UUID,
    ) -> Assignment:
        assignment = Assignment(
            module_name=module_name,
            assigned_by=assigned_by,
            is_active=True,
            admins=list(admins),
        )
        self._session.add(assignment)
        await self._session.flush()
        return assignment

    async def get(self, assignment_id: uuid.UUID, *, for_update: bool = False) -> Assignment | None:
        # Row lock keeps concurrent updates of one assignment from interleaving.
        return await self._session.get(Assignment, assignment_id, with_for_update=for_update)

    async def get_active_by_module(
        self, module_name: str, *, exclude_id: uuid.UUID | None = None
    ) -> Assignment | None:
        stmt = select(Assignment).where(
            Assignment.module_name == module_name, Assignment.is_active.is_(True)
        )
        if exclude_id is not None:
            stmt = stmt.where(Assignment.id != exclude_id)
        return (await self._session.execute(stmt.limit(1))).scalar_one_or_none()

    async def get_by_module(self, module_name: str) -> Assignment | None:
        # Prefer the active row; fall back to the most recent inactive one.
        stmt = (
            select(Assignment)
            .where(Assignment.module_name == module_name)
            .order_by(Assignment.is_active.desc(), Assignment.updated_at.desc())
            .limit(1)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_all(self, *, include_inactive: bool = False) -> list[Assignment]:
        stmt = select(Assignment).order_by(Assignment.module_name)
        if not include_inactive:
            stmt = stmt.where(Assignment.is_active.is_(True))
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_active_for_admin(self, admin_id: uuid.UUID) -> list[Assignment]:
        stmt = (
            select(Assignment)
            .join(assignment_admins, assignment_admins.c.assignment_id == Assignment.id)
            .where(assignment_admins.c.user_id == admin_id, Assignment.is_active.is_(True))
            .order_by(Assignment.module_name)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_other_containing(
        self, admin_ids: Sequence[uuid.UUID], *, exclude_id: uuid.UUID | None
    ) -> list[Assignment]:
        if not admin_ids:
            return []
        stmt = (
            select(Assignment)
            .join(assignment_admins, assignment_admins.c.assignment_id == Assignment.id)
            .where(assignment_admins.c.user_id.in_(list(admin_ids)))
            .distinct()
        )
        if exclude_id is not None:
            stmt = stmt.where(Assignment.id != exclude_id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def is_active_member(
        self,
        admin_id: uuid.UUID,
        *,
        assignment_id: uuid.UUID | None = None,
        module_name: str | None = None,
    ) -> bool:
        conditions = [
            assignment_admins.c.assignment_id == Assignment.id,
            assignment_admins.c.user_id == admin_id,
            Assignment.is_active.is_(True),
        ]
        if assignment_id is not None:
            conditions.append(Assignment.id == assignment_id)
        if module_name is not None:
            conditions.append(Assignment.module_name == module_name)
        stmt = select(exists().where(and_(*conditions)))
        return bool((await self._session.execute(stmt)).scalar())

    async def delete(self, assignment: Assignment) -> None:
        await self._session.delete(assignment)
        await self._session.flush()
