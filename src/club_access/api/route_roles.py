"""
club_access.api.route_roles

Static route -> allowed-roles table consulted by the role guard.

Route names are set explicitly on each endpoint (`name="<group>.<action>"`).
A route without an entry, in a group without an entry, only requires a valid token.
"""

from __future__ import annotations

from club_access.auth.guards import RouteRoleTable
from club_access.db.models import Role

ROUTE_ROLES = RouteRoleTable.build(
    groups={
        "assignments": [Role.superadmin],
    },
    routes={
        "assignments.admin_modules": [Role.admin],
        "assignments.admin_access": [Role.admin],
        "assignments.admin_my_assignments": [Role.admin],
    },
)
