"""
club_access.api.routers.auth

Authentication endpoints.

Responsibilities:
- Username/password and identity-document login.
- Superadmin registration.
- Logout (token revocation) and principal introspection.
"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from club_access.api.deps import container_dep, db_session
from club_access.auth.deps import enforce_route_roles
from club_access.auth.models import Principal
from club_access.container import AuthContainer
from club_access.db.models import Role
from club_access.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])

_optional_bearer = HTTPBearer(auto_error=False)


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=128)
    password: str = Field(min_length=1, max_length=256)


class DocumentLoginRequest(BaseModel):
    document: str = Field(min_length=1, max_length=32)
    role: Literal["athlete", "parent"] | None = None


class RegisterRequest(BaseModel):
    username: str | None = Field(default=None, max_length=128)
    password: str | None = Field(default=None, max_length=256)
    # Accepted for compatibility; registration always creates a superadmin.
    roles: list[str] | None = None
    name: str | None = Field(default=None, max_length=128)
    lastname: str | None = Field(default=None, max_length=128)


class RegisteredUser(BaseModel):
    id: str
    username: str
    role: str
    name: str | None = None
    lastname: str | None = None


class PrincipalResponse(BaseModel):
    sub: str
    username: str | None
    role: str | list[str]
    ci: str | None = None


def _service(session: AsyncSession, container: AuthContainer) -> AuthService:
    return AuthService(
        session=session,
        jwt_cfg=container.jwt,
        revocations=container.revocations,
        bcrypt_rounds=container.settings.bcrypt_rounds,
    )


@router.post("/login", name="auth.login")
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(db_session),
    container: AuthContainer = Depends(container_dep),
) -> dict[str, Any]:
    result = await _service(session, container).login(
        username=body.username, password=body.password
    )
    return result.envelope()


@router.post("/login-by-document", name="auth.login_by_document")
async def login_by_document(
    body: DocumentLoginRequest,
    session: AsyncSession = Depends(db_session),
    container: AuthContainer = Depends(container_dep),
) -> dict[str, Any]:
    result = await _service(session, container).login_by_document(
        document=body.document, role=body.role
    )
    return result.envelope()


@router.post(
    "/register",
    name="auth.register",
    status_code=HTTP_201_CREATED,
    response_model=RegisteredUser,
)
async def register(
    body: RegisterRequest,
    session: AsyncSession = Depends(db_session),
    container: AuthContainer = Depends(container_dep),
) -> RegisteredUser:
    user = await _service(session, container).register(
        username=body.username,
        password=body.password,
        role=Role.superadmin,
        name=body.name,
        lastname=body.lastname,
    )
    return RegisteredUser(
        id=str(user.id),
        username=user.username or "",
        role=user.role,
        name=user.name,
        lastname=user.lastname,
    )


@router.post("/logout", name="auth.logout", status_code=HTTP_204_NO_CONTENT)
async def logout(
    creds: HTTPAuthorizationCredentials | None = Depends(_optional_bearer),
    session: AsyncSession = Depends(db_session),
    container: AuthContainer = Depends(container_dep),
) -> Response:
    # Always 204; the client clears its local state regardless.
    await _service(session, container).logout(creds.credentials if creds else None)
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.get("/me", name="auth.me", response_model=PrincipalResponse)
async def me(principal: Principal = Depends(enforce_route_roles)) -> PrincipalResponse:
    role = principal.role if isinstance(principal.role, str) else list(principal.role)
    return PrincipalResponse(
        sub=principal.subject, username=principal.username, role=role, ci=principal.ci
    )


# --- Module Notes -----------------------------------------------------------
# Login and register are public; `/auth/me` has no entry in the route-role table,
# so any valid, unrevoked token is accepted.
