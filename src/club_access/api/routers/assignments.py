"""
club_access.api.routers.assignments

Module assignment endpoints.

Responsibilities:
- Superadmin CRUD over assignments.
- Admin self-service queries scoped to the caller.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from club_access.api.deps import db_session
from club_access.auth.deps import get_principal, require_assignment
from club_access.auth.models import Principal
from club_access.services.assignment_service import (
    AssignmentPatch,
    AssignmentService,
    AssignmentView,
)

# Token validation -> route-role table -> assignment-required policy, for every route here.
router = APIRouter(
    prefix="/assignments",
    tags=["assignments"],
    dependencies=[Depends(require_assignment)],
)


class CreateAssignmentRequest(BaseModel):
    module_name: str = Field(min_length=1, max_length=128)
    assigned_admins: list[uuid.UUID] = Field(default_factory=list)


class UpdateAssignmentRequest(BaseModel):
    module_name: str | None = Field(default=None, min_length=1, max_length=128)
    assigned_admins: list[uuid.UUID] | None = None
    is_active: bool | None = None


class AdminSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str | None
    name: str | None
    lastname: str | None


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    module_name: str
    assigned_admins: list[AdminSummaryResponse]
    assigned_by: uuid.UUID
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ModuleAccessResponse(BaseModel):
    module: str
    has_access: bool = Field(serialization_alias="hasAccess")


def _out(view: AssignmentView) -> AssignmentResponse:
    return AssignmentResponse.model_validate(view)


def _subject_id(principal: Principal) -> uuid.UUID:
    return uuid.UUID(principal.subject)


@router.post(
    "",
    name="assignments.create",
    status_code=HTTP_201_CREATED,
    response_model=AssignmentResponse,
)
async def create_assignment(
    body: CreateAssignmentRequest,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> AssignmentResponse:
    view = await AssignmentService(session=session).create(
        module_name=body.module_name,
        assigned_admins=body.assigned_admins,
        creator_id=_subject_id(principal),
    )
    return _out(view)


@router.get(
    "/admin/modules",
    name="assignments.admin_modules",
    response_model=list[str],
)
async def my_modules(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> list[str]:
    return await AssignmentService(session=session).get_modules_by_admin(_subject_id(principal))


@router.get(
    "/admin/access/{module_name}",
    name="assignments.admin_access",
    response_model=ModuleAccessResponse,
    response_model_by_alias=True,
)
async def check_module_access(
    module_name: str,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> ModuleAccessResponse:
    has_access = await AssignmentService(session=session).has_access_to_module(
        _subject_id(principal), module_name
    )
    return ModuleAccessResponse(module=module_name, has_access=has_access)


@router.get(
    "/admin/my-assignments",
    name="assignments.admin_my_assignments",
    response_model=list[AssignmentResponse],
)
async def my_assignments(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> list[AssignmentResponse]:
    views = await AssignmentService(session=session).get_assignments_by_admin(
        _subject_id(principal)
    )
    return [_out(v) for v in views]


@router.get(
    "/module/{module_name}",
    name="assignments.find_by_module",
    response_model=AssignmentResponse,
)
async def find_by_module(
    module_name: str,
    session: AsyncSession = Depends(db_session),
) -> AssignmentResponse:
    return _out(await AssignmentService(session=session).find_by_module_name(module_name))


@router.get("", name="assignments.list", response_model=list[AssignmentResponse])
async def list_assignments(
    include_inactive: bool = False,
    session: AsyncSession = Depends(db_session),
) -> list[AssignmentResponse]:
    views = await AssignmentService(session=session).find_all(include_inactive=include_inactive)
    return [_out(v) for v in views]


@router.get(
    "/{assignment_id}",
    name="assignments.get",
    response_model=AssignmentResponse,
)
async def get_assignment(
    assignment_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> AssignmentResponse:
    return _out(await AssignmentService(session=session).find_by_id(assignment_id))


@router.patch(
    "/{assignment_id}",
    name="assignments.update",
    response_model=AssignmentResponse,
)
async def update_assignment(
    assignment_id: uuid.UUID,
    body: UpdateAssignmentRequest,
    session: AsyncSession = Depends(db_session),
) -> AssignmentResponse:
    patch = AssignmentPatch(
        module_name=body.module_name,
        assigned_admins=body.assigned_admins,
        is_active=body.is_active,
    )
    return _out(await AssignmentService(session=session).update(assignment_id, patch))


@router.delete("/{assignment_id}", name="assignments.delete")
async def delete_assignment(
    assignment_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, str]:
    return await AssignmentService(session=session).delete(assignment_id)


# --- Module Notes -----------------------------------------------------------
# Route order matters: the literal `/admin/...` and `/module/...` paths are declared
# before `/{assignment_id}` so they are not captured as ids.
