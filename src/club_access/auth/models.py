"""
club_access.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass

from club_access.db.models import Role


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity, derived from a validated token for one request.
    """

    subject: str
    username: str | None
    role: str | tuple[str, ...]
    roles: frozenset[str]
    token_id: str
    ci: str | None = None

    @property
    def is_admin(self) -> bool:
        return Role.admin in self.roles


def normalize_roles(raw: object) -> frozenset[str]:
    # A `role` claim may be a single value or a list on multi-role records.
    if isinstance(raw, str):
        return frozenset({raw}) if raw else frozenset()
    if isinstance(raw, (list, tuple, set, frozenset)):
        return frozenset(str(r) for r in raw if r)
    return frozenset()


# --- Module Notes -----------------------------------------------------------
# Keep this model minimal; it is used across API, services and guards.
