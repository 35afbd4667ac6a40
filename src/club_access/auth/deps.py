"""
club_access.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer token into a typed `Principal`.
- Enforce the route-role table and the assignment-required policy.
"""

from __future__ import annotations

import uuid

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_401_UNAUTHORIZED

from club_access.api.deps import container_dep, db_session
from club_access.auth.guards import check_assignment_required, check_roles
from club_access.auth.models import Principal
from club_access.container import AuthContainer
from club_access.db.models import User
from club_access.db.repositories.users import UserRepo
from club_access.observability.middleware import bind_principal

_bearer = HTTPBearer(auto_error=False)


async def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    container: AuthContainer = Depends(container_dep),
) -> Principal:
    # Authn: require a bearer token.
    if creds is None or not creds.credentials:
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    # Signature, registered claims and revocation; raises Unauthorized.
    principal = await container.validator.validate(creds.credentials)
    bind_principal(subject=principal.subject, token_id=principal.token_id)
    return principal


def _route_name(request: Request) -> str | None:
    route = request.scope.get("route")
    return getattr(route, "name", None)


async def enforce_route_roles(
    request: Request,
    principal: Principal = Depends(get_principal),
    container: AuthContainer = Depends(container_dep),
) -> Principal:
    # `get_principal` has already run; an invalid token never reaches the table lookup.
    check_roles(principal, container.route_roles.required_roles(_route_name(request)))
    return principal


async def require_assignment(
    principal: Principal = Depends(enforce_route_roles),
    session: AsyncSession = Depends(db_session),
) -> Principal:
    async def _load(subject: str) -> User | None:
        return await UserRepo(session).get(uuid.UUID(subject))

    await check_assignment_required(principal, _load)
    return principal


# --- Module Notes -----------------------------------------------------------
# Routers attach `require_assignment` (which pulls in the role guard and token
# validation) as a router-level dependency; handlers then ask for `get_principal`,
# which FastAPI serves from its per-request dependency cache.
