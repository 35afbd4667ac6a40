"""
club_access.container

Process-wide dependency container.

Responsibilities:
- Build the token validator, revocation registry and route-role table once at startup.
- Hand them to request handlers through `app.state.container`.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from club_access.auth.guards import RouteRoleTable
from club_access.auth.jwt import JwtConfig
from club_access.auth.revocation import RevocationRegistry, SqlRevocationRegistry
from club_access.auth.validator import TokenValidator
from club_access.settings import Settings


@dataclass(frozen=True, slots=True)
class AuthContainer:
    settings: Settings
    jwt: JwtConfig
    revocations: RevocationRegistry
    validator: TokenValidator
    route_roles: RouteRoleTable


def build_container(
    *,
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    route_roles: RouteRoleTable,
    revocations: RevocationRegistry | None = None,
) -> AuthContainer:
    cfg = JwtConfig.from_settings(settings)
    registry = revocations if revocations is not None else SqlRevocationRegistry(session_factory)
    return AuthContainer(
        settings=settings,
        jwt=cfg,
        revocations=registry,
        validator=TokenValidator(cfg=cfg, registry=registry),
        route_roles=route_roles,
    )
