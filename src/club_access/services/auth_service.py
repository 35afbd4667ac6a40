"""
club_access.services.auth_service

Credential verification and token lifecycle.

Responsibilities:
- Username/password login for staff roles.
- Identity-document login for athletes and parents.
- Superadmin registration with bcrypt-hashed passwords.
- Logout (token revocation).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from club_access.auth.jwt import (
    JwtConfig,
    JwtValidationError,
    decode_and_validate,
    issue_token,
    token_id_of,
)
from club_access.auth.passwords import hash_password, verify_password
from club_access.auth.revocation import RevocationRegistry
from club_access.db.models import DOCUMENT_ONLY_ROLES, Role, User
from club_access.db.repositories.users import UserRepo
from club_access.errors import BadRequest, Conflict, Unauthorized
from club_access.observability.logging import get_logger

log = get_logger(__name__)

INVALID_CREDENTIALS = "Credenciales inválidas"
ROLE_MISMATCH = "El rol seleccionado no coincide"


@dataclass(frozen=True, slots=True)
class LoginResult:
    token: str
    user: dict[str, Any]

    def envelope(self) -> dict[str, Any]:
        return {"access": {"authorization": self.token, "user": self.user}}


def _user_projection(user: User, *, role: str | list[str]) -> dict[str, Any]:
    return {
        "id": str(user.id),
        "name": user.name,
        "lastname": user.lastname,
        "role": role,
        "assignment_id": str(user.assignment_id) if user.assignment_id else None,
    }


class AuthService:
    def __init__(
        self,
        *,
        session: AsyncSession,
        jwt_cfg: JwtConfig,
        revocations: RevocationRegistry,
        bcrypt_rounds: int,
    ) -> None:
        self._session = session
        self._jwt = jwt_cfg
        self._revocations = revocations
        self._bcrypt_rounds = bcrypt_rounds
        self._users = UserRepo(session)

    async def login(self, *, username: str, password: str) -> LoginResult:
        user = await self._users.get_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            log.info("login_rejected", reason="bad_credentials")
            raise Unauthorized(INVALID_CREDENTIALS)

        # Athletes and parents authenticate by identity document only.
        if user.role_set <= DOCUMENT_ONLY_ROLES:
            log.info("login_rejected", reason="document_only_role", user_id=str(user.id))
            raise Unauthorized(INVALID_CREDENTIALS)

        return self._issue(user)

    async def login_by_document(self, *, document: str, role: str | None = None) -> LoginResult:
        candidates = [
            u for u in await self._users.find_by_ci(document) if u.role_set & DOCUMENT_ONLY_ROLES
        ]
        if not candidates:
            log.info("login_rejected", reason="unknown_document")
            raise Unauthorized(INVALID_CREDENTIALS)

        if role is not None:
            user = next((u for u in candidates if role in u.role_set), None)
            if user is None:
                log.info("login_rejected", reason="role_mismatch", role=role)
                raise Unauthorized(ROLE_MISMATCH)
        else:
            # Athlete records win over parent records sharing a document.
            user = next(
                (u for u in candidates if Role.athlete in u.role_set),
                candidates[0],
            )

        # Document login never carries the record's staff roles.
        if role is None:
            granted = sorted(str(r) for r in user.role_set & DOCUMENT_ONLY_ROLES)
        else:
            granted = [role]
        return self._issue(
            user,
            role=granted[0] if len(granted) == 1 else granted,
            extra_claims={"ci": document},
        )

    async def register(
        self,
        *,
        username: str | None,
        password: str | None,
        role: str = Role.superadmin,
        name: str | None = None,
        lastname: str | None = None,
    ) -> User:
        if not username or not password:
            raise BadRequest("username and password are required")
        if await self._users.get_by_username(username) is not None:
            raise Conflict("Username already exists")

        try:
            user = await self._users.create(
                username=username,
                password_hash=hash_password(password, rounds=self._bcrypt_rounds),
                role=str(role),
                name=name,
                lastname=lastname,
            )
            await self._session.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same username.
            await self._session.rollback()
            raise Conflict("Username already exists") from e

        log.info("user_registered", user_id=str(user.id), role=user.role)
        return user

    async def logout(self, token: str | None) -> bool:
        """
        Revoke `token` until its original expiry. Never raises: a token that
        cannot be decoded is simply not revoked.
        """

        if not token:
            return False
        try:
            payload = decode_and_validate(cfg=self._jwt, token=token, verify_exp=False)
        except JwtValidationError as e:
            log.info("logout_ignored", reason=str(e))
            return False

        jti = token_id_of(payload)
        exp = payload.get("exp")
        if jti is None or exp is None:
            return False
        try:
            await self._revocations.revoke(jti, int(exp))
        except Exception:
            log.exception("logout_revoke_failed", jti=jti)
            return False
        return True

    def _issue(
        self,
        user: User,
        *,
        role: str | list[str] | None = None,
        extra_claims: dict[str, Any] | None = None,
    ) -> LoginResult:
        role = role if role is not None else user.role_claim
        issued = issue_token(
            cfg=self._jwt,
            subject=str(user.id),
            username=user.username,
            role=role,
            extra_claims=extra_claims,
        )
        log.info("login_succeeded", user_id=str(user.id), jti=issued.jti)
        return LoginResult(token=issued.token, user=_user_projection(user, role=role))


# --- Module Notes -----------------------------------------------------------
# Login failures share one message so callers cannot probe which usernames exist.
