"""
club_access.auth.validator

Bearer token validation.

Responsibilities:
- Verify signature and registered claims of an incoming token.
- Reject revoked tokens via the revocation registry.
- Produce the immutable `Principal` used for the rest of the request.
"""

from __future__ import annotations

from club_access.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate, token_id_of
from club_access.auth.models import Principal, normalize_roles
from club_access.auth.revocation import RevocationRegistry
from club_access.errors import Unauthorized
from club_access.observability.logging import get_logger

log = get_logger(__name__)


class TokenValidator:
    def __init__(self, *, cfg: JwtConfig, registry: RevocationRegistry) -> None:
        self._cfg = cfg
        self._registry = registry

    async def validate(self, token: str) -> Principal:
        try:
            payload = decode_and_validate(cfg=self._cfg, token=token)
        except JwtValidationError as e:
            log.info("token_rejected", reason=str(e))
            raise Unauthorized(f"Invalid token: {e}") from e

        jti = token_id_of(payload)
        if jti is None:
            raise Unauthorized("Invalid token subject")

        try:
            revoked = await self._registry.is_revoked(jti)
        except Exception as e:
            # A registry we cannot read must not let the token through.
            log.exception("revocation_lookup_failed", jti=jti)
            raise Unauthorized("Token could not be verified") from e
        if revoked:
            log.info("token_rejected", reason="revoked", jti=jti)
            raise Unauthorized("Token revoked")

        raw_role = payload.get("role")
        roles = normalize_roles(raw_role)
        if not roles:
            raise Unauthorized("Invalid token role")

        return Principal(
            subject=str(payload["sub"]),
            username=payload.get("username"),
            role=raw_role if isinstance(raw_role, str) else tuple(sorted(roles)),
            roles=roles,
            token_id=jti,
            ci=payload.get("ci"),
        )


# --- Module Notes -----------------------------------------------------------
# Wired once at startup in `club_access.container.build_container`.
