"""
club_access.auth.jwt

JWT issuing and validation helpers.

Responsibilities:
- Issue signed, 60-minute access tokens carrying `{username, sub, role, jti}`.
- Decode and validate JWTs with strict claim requirements (iss/aud/exp/iat/sub).
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from club_access.settings import Settings

TOKEN_TTL = timedelta(minutes=60)


@dataclass(frozen=True, slots=True)
class JwtConfig:
    # Algorithm/issuer/audience are enforced during decoding.
    alg: str
    issuer: str
    audience: str
    secret: str

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
        )


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    jti: str
    expires_at: int


class JwtValidationError(Exception):
    pass


def new_token_id() -> str:
    return secrets.token_hex(16)


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    username: str | None,
    role: str | list[str],
    extra_claims: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> IssuedToken:
    now = now or datetime.now(tz=UTC)
    jti = new_token_id()
    expires_at = int((now + TOKEN_TTL).timestamp())
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": subject,
        "username": username,
        "role": role,
        "jti": jti,
        "iat": int(now.timestamp()),
        "exp": expires_at,
    }
    if extra_claims:
        payload.update(extra_claims)
    return IssuedToken(
        token=jwt.encode(payload, cfg.secret, algorithm=cfg.alg),
        jti=jti,
        expires_at=expires_at,
    )


def decode_and_validate(*, cfg: JwtConfig, token: str, verify_exp: bool = True) -> dict[str, Any]:
    try:
        # jwt.decode enforces signature + registered claims (issuer/audience/exp, etc.).
        return jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={
                "require": ["exp", "iat", "iss", "aud", "sub"],
                "verify_exp": verify_exp,
            },
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e


def token_id_of(payload: dict[str, Any]) -> str | None:
    # Tokens minted without an explicit jti are keyed by their subject.
    jti = payload.get("jti") or payload.get("sub")
    return str(jti) if jti else None


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by `services.auth_service`; validation by `auth.validator`
# and by logout (with `verify_exp=False`).
