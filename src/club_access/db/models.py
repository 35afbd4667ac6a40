"""
club_access.db.models

Persistence schema for the authentication and authorization core.

Responsibilities:
- Define ORM models for:
  - User: credential record (role, password hash, identity document, assignment reference)
  - RevokedToken: jti blocklist used for early token invalidation
  - Assignment: a named module bound to a set of admin users
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    ForeignKey,
    Index,
    String,
    Table,
    Uuid as SAUuid,
    text,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from club_access.db.base import Base


def _utcnow() -> datetime:
    # Persist naive UTC timestamps; every comparison in this package is UTC.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class Role(enum.StrEnum):
    superadmin = "superadmin"
    admin = "admin"
    coach = "coach"
    assistant = "assistant"
    athlete = "athlete"
    parent = "parent"


# Roles that may only authenticate with their identity document.
DOCUMENT_ONLY_ROLES: frozenset[str] = frozenset({Role.athlete, Role.parent})


assignment_admins = Table(
    "assignment_admins",
    Base.metadata,
    Column(
        "assignment_id",
        SAUuid(as_uuid=True),
        ForeignKey("assignments.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "user_id",
        SAUuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class Assignment(Base):
    __tablename__ = "assignments"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    module_name: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    # Creator id; not a FK so users <-> assignments stays acyclic.
    assigned_by: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True, server_default=true())

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    admins: Mapped[list[User]] = relationship(
        secondary=assignment_admins,
        lazy="selectin",
        order_by="User.username",
    )

    __table_args__ = (
        # At most one active assignment per module name.
        Index(
            "uq_assignments_active_module",
            "module_name",
            unique=True,
            sqlite_where=text("is_active"),
            postgresql_where=text("is_active"),
        ),
    )


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Parents may exist without a username; they log in by identity document.
    username: Mapped[str | None] = mapped_column(String(128), nullable=True, unique=True)
    password_hash: Mapped[str | None] = mapped_column(String(128), nullable=True)

    role: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    roles: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    lastname: Mapped[str | None] = mapped_column(String(128), nullable=True)
    ci: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)

    # Only meaningful for role=admin; kept in step with `assignment_admins`.
    assignment_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True),
        ForeignKey("assignments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    @property
    def role_set(self) -> frozenset[str]:
        # `roles` (multi-role records) takes precedence over the legacy single `role`.
        if self.roles:
            return frozenset(str(r) for r in self.roles)
        return frozenset({self.role})

    @property
    def role_claim(self) -> str | list[str]:
        roles = self.role_set
        if len(roles) > 1:
            return sorted(roles)
        return next(iter(roles))


class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    jti: Mapped[str] = mapped_column(String(64), primary_key=True)
    # Original token `exp` (epoch seconds); rows are reaped once it has passed.
    exp: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    revoked_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)


# --- Module Notes -----------------------------------------------------------
# `User.assignment_id` duplicates membership in `assignment_admins` for fast guard
# lookups; every write path goes through `AssignmentService`, which updates both
# sides in one transaction.
