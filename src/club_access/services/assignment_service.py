"""
club_access.services.assignment_service

Assignment registry: which admins may operate which named module.

Responsibilities:
- CRUD over module assignments with module-name uniqueness among active rows.
- Keep `User.assignment_id` and the assignment's admin set mutually consistent,
  writing both sides in the same transaction.
- Membership queries used for scoping admin requests.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from club_access.db.models import Assignment, Role, User
from club_access.db.repositories.assignments import AssignmentRepo
from club_access.db.repositories.users import UserRepo
from club_access.errors import BadRequest, NotFound
from club_access.observability.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AdminSummary:
    id: uuid.UUID
    username: str | None
    name: str | None
    lastname: str | None


@dataclass(frozen=True, slots=True)
class AssignmentView:
    id: uuid.UUID
    module_name: str
    assigned_admins: list[AdminSummary]
    assigned_by: uuid.UUID
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class AssignmentPatch:
    module_name: str | None = None
    assigned_admins: Sequence[uuid.UUID] | None = None
    is_active: bool | None = None


def to_view(assignment: Assignment) -> AssignmentView:
    return AssignmentView(
        id=assignment.id,
        module_name=assignment.module_name,
        assigned_admins=[
            AdminSummary(id=u.id, username=u.username, name=u.name, lastname=u.lastname)
            for u in assignment.admins
        ],
        assigned_by=assignment.assigned_by,
        is_active=assignment.is_active,
        created_at=assignment.created_at,
        updated_at=assignment.updated_at,
    )


def _dedupe(ids: Sequence[uuid.UUID]) -> list[uuid.UUID]:
    return list(dict.fromkeys(ids))


class AssignmentService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._assignments = AssignmentRepo(session)
        self._users = UserRepo(session)

    # -- writes ---------------------------------------------------------------

    async def create(
        self,
        *,
        module_name: str,
        assigned_admins: Sequence[uuid.UUID],
        creator_id: uuid.UUID,
    ) -> AssignmentView:
        if await self._assignments.get_active_by_module(module_name) is not None:
            raise BadRequest(f"El módulo '{module_name}' ya tiene una asignación existente")
        admin_ids = _dedupe(assigned_admins)
        if not admin_ids:
            raise BadRequest("Debe asignar al menos un administrador al módulo")
        admins = await self._load_admins(admin_ids)

        try:
            await self._detach_from_other_assignments(admin_ids, keep_id=None)
            assignment = await self._assignments.create(
                module_name=module_name, admins=admins, assigned_by=creator_id
            )
            await self._users.set_assignment(admin_ids, assignment.id)
            await self._session.commit()
        except IntegrityError as e:
            # Partial unique index caught a concurrent create of the same module.
            await self._session.rollback()
            raise BadRequest(
                f"El módulo '{module_name}' ya tiene una asignación existente"
            ) from e

        log.info(
            "assignment_created",
            assignment_id=str(assignment.id),
            module=module_name,
            admins=[str(a) for a in admin_ids],
        )
        return to_view(await self._reload(assignment.id))

    async def update(self, assignment_id: uuid.UUID, patch: AssignmentPatch) -> AssignmentView:
        assignment = await self._assignments.get(assignment_id, for_update=True)
        if assignment is None:
            raise NotFound(f"Asignación con ID '{assignment_id}' no encontrada")

        becomes_active = patch.is_active if patch.is_active is not None else assignment.is_active
        target_name = patch.module_name or assignment.module_name
        name_changed = target_name != assignment.module_name
        restoring = becomes_active and not assignment.is_active

        if becomes_active and (name_changed or restoring):
            clash = await self._assignments.get_active_by_module(
                target_name, exclude_id=assignment.id
            )
            if clash is not None:
                raise BadRequest(f"Ya existe una asignación para el módulo '{target_name}'")

        current_ids = [u.id for u in assignment.admins]
        try:
            if patch.assigned_admins is not None:
                new_ids = _dedupe(patch.assigned_admins)
                if not new_ids:
                    raise BadRequest("Debe mantener al menos un administrador asignado al módulo")
                admins = await self._load_admins(new_ids)
                keep = set(new_ids)
                removed = [i for i in current_ids if i not in keep]

                await self._users.clear_assignment(removed, assignment_id=assignment.id)
                assignment.admins = admins
                current_ids = new_ids
                # Membership stays exclusive while this assignment is inactive too.
                await self._detach_from_other_assignments(new_ids, keep_id=assignment.id)
                if becomes_active:
                    # Re-sending the set also re-links members after a restore.
                    await self._users.set_assignment(new_ids, assignment.id)

            if not becomes_active and assignment.is_active:
                # Soft delete: members lose their reference but stay in the set.
                await self._users.clear_assignment(current_ids, assignment_id=assignment.id)

            assignment.module_name = target_name
            assignment.is_active = becomes_active
            # Admin-set changes alone do not touch the row, so bump it explicitly.
            assignment.updated_at = datetime.now(tz=UTC).replace(tzinfo=None)
            await self._session.flush()
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise BadRequest(f"Ya existe una asignación para el módulo '{target_name}'") from e
        except BadRequest:
            await self._session.rollback()
            raise

        log.info(
            "assignment_updated",
            assignment_id=str(assignment_id),
            module=target_name,
            is_active=becomes_active,
            restored=restoring,
        )
        return to_view(await self._reload(assignment_id))

    async def delete(self, assignment_id: uuid.UUID) -> dict[str, str]:
        assignment = await self._assignments.get(assignment_id, for_update=True)
        if assignment is None:
            raise NotFound(f"Asignación con ID '{assignment_id}' no encontrada")

        await self._users.clear_all_for_assignment(assignment.id)
        await self._assignments.delete(assignment)
        await self._session.commit()
        log.info("assignment_deleted", assignment_id=str(assignment_id))
        return {"message": "Asignación eliminada correctamente"}

    # -- reads ----------------------------------------------------------------

    async def find_all(self, *, include_inactive: bool = False) -> list[AssignmentView]:
        rows = await self._assignments.list_all(include_inactive=include_inactive)
        return [to_view(a) for a in rows]

    async def find_by_id(self, assignment_id: uuid.UUID) -> AssignmentView:
        assignment = await self._assignments.get(assignment_id)
        if assignment is None:
            raise NotFound(f"Asignación con ID '{assignment_id}' no encontrada")
        return to_view(assignment)

    async def find_by_module_name(self, module_name: str) -> AssignmentView:
        assignment = await self._assignments.get_by_module(module_name)
        if assignment is None:
            raise NotFound(f"Asignación para el módulo '{module_name}' no encontrada")
        return to_view(assignment)

    async def get_modules_by_admin(self, admin_id: uuid.UUID) -> list[str]:
        rows = await self._assignments.list_active_for_admin(admin_id)
        return [a.module_name for a in rows]

    async def get_assignments_by_admin(self, admin_id: uuid.UUID) -> list[AssignmentView]:
        return [to_view(a) for a in await self._assignments.list_active_for_admin(admin_id)]

    async def has_access_to_module(self, admin_id: uuid.UUID, module_name: str) -> bool:
        return await self._assignments.is_active_member(admin_id, module_name=module_name)

    async def is_user_admin_of_assignment(
        self, user_id: uuid.UUID, assignment_id: uuid.UUID
    ) -> bool:
        return await self._assignments.is_active_member(user_id, assignment_id=assignment_id)

    # -- helpers --------------------------------------------------------------

    async def _load_admins(self, admin_ids: list[uuid.UUID]) -> list[User]:
        users = {u.id: u for u in await self._users.list_by_ids(admin_ids)}
        missing = [str(i) for i in admin_ids if i not in users]
        if missing:
            raise BadRequest(f"Administradores no encontrados: {', '.join(missing)}")
        not_admins = [str(u.id) for u in users.values() if Role.admin not in u.role_set]
        if not_admins:
            raise BadRequest(
                f"Los usuarios no tienen rol de administrador: {', '.join(not_admins)}"
            )
        return [users[i] for i in admin_ids]

    async def _detach_from_other_assignments(
        self, admin_ids: list[uuid.UUID], *, keep_id: uuid.UUID | None
    ) -> None:
        # An admin holds one assignment reference, so membership elsewhere is dropped.
        moving = set(admin_ids)
        for other in await self._assignments.list_other_containing(admin_ids, exclude_id=keep_id):
            leaving = [u.id for u in other.admins if u.id in moving]
            other.admins = [u for u in other.admins if u.id not in moving]
            await self._users.clear_assignment(leaving, assignment_id=other.id)
            if leaving:
                log.info(
                    "assignment_admins_moved",
                    from_assignment_id=str(other.id),
                    module=other.module_name,
                )

    async def _reload(self, assignment_id: uuid.UUID) -> Assignment:
        assignment = await self._assignments.get(assignment_id)
        if assignment is None:
            raise NotFound(f"Asignación con ID '{assignment_id}' no encontrada")
        await self._session.refresh(assignment)
        return assignment


# --- Module Notes -----------------------------------------------------------
# Restoring an assignment (`is_active` back to true) does not re-link its members;
# the superadmin re-sends `assigned_admins` to do so. See DESIGN.md.
