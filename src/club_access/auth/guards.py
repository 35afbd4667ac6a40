"""
club_access.auth.guards

Authorization decisions, independent of the web framework.

Responsibilities:
- Resolve the roles a route declares from a static metadata table
  (route-level entries override group-level ones).
- Decide role access for a principal.
- Enforce that admin principals hold an assignment.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field

from club_access.auth.models import Principal
from club_access.db.models import User
from club_access.errors import Forbidden
from club_access.observability.logging import get_logger

log = get_logger(__name__)

ROLE_DENIED_DETAIL = "You are not authorized to access this module"
ASSIGNMENT_REQUIRED_DETAIL = (
    "El usuario administrador no tiene una asignación válida. Contacta al superadmin."
)


def _roles(*roles: str) -> frozenset[str]:
    return frozenset(str(r) for r in roles)


@dataclass(frozen=True)
class RouteRoleTable:
    """
    Route name -> allowed roles.

    Route names are `"<group>.<action>"`. `groups` holds the default for every
    route in a group; `routes` overrides it for a single route.
    """

    groups: Mapping[str, frozenset[str]] = field(default_factory=dict)
    routes: Mapping[str, frozenset[str]] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        *,
        groups: Mapping[str, Iterable[str]] | None = None,
        routes: Mapping[str, Iterable[str]] | None = None,
    ) -> RouteRoleTable:
        return cls(
            groups={k: _roles(*v) for k, v in (groups or {}).items()},
            routes={k: _roles(*v) for k, v in (routes or {}).items()},
        )

    def required_roles(self, route_name: str | None) -> frozenset[str] | None:
        if not route_name:
            return None
        if route_name in self.routes:
            return self.routes[route_name]
        group = route_name.split(".", 1)[0]
        return self.groups.get(group)


def check_roles(principal: Principal, required: frozenset[str] | None) -> None:
    # No declared roles: authentication alone suffices.
    if not required:
        return
    if principal.roles.isdisjoint(required):
        log.info(
            "role_guard_denied",
            subject=principal.subject,
            roles=sorted(principal.roles),
            required=sorted(required),
        )
        raise Forbidden(ROLE_DENIED_DETAIL)


async def check_assignment_required(
    principal: Principal,
    load_user: Callable[[str], Awaitable[User | None]],
) -> None:
    if not principal.is_admin:
        return

    try:
        user = await load_user(principal.subject)
    except Exception:
        # Lookup failures are reported as the same denial the caller would get
        # for a missing assignment; the cause only goes to the logs.
        log.warning("assignment_guard_lookup_failed", subject=principal.subject, exc_info=True)
        raise Forbidden(ASSIGNMENT_REQUIRED_DETAIL) from None

    if user is None or user.assignment_id is None:
        log.info("assignment_guard_denied", subject=principal.subject)
        raise Forbidden(ASSIGNMENT_REQUIRED_DETAIL)


# --- Module Notes -----------------------------------------------------------
# The application's table lives in `club_access.api.route_roles`.
