"""
club_access.auth.revocation

Revocation registry: the set of token ids invalidated before natural expiry.

Responsibilities:
- Record revoked jtis idempotently (double logout is not an error).
- Answer point lookups on every authenticated request.
- Reap rows whose original expiry has passed, optionally on a background sweep.
"""

from __future__ import annotations

import asyncio
import time
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from club_access.db.repositories.revoked_tokens import RevokedTokenRepo
from club_access.observability.logging import get_logger

log = get_logger(__name__)


def _now() -> int:
    return int(time.time())


class RevocationRegistry(Protocol):
    async def revoke(self, jti: str, exp: int) -> None: ...

    async def is_revoked(self, jti: str) -> bool: ...

    async def cleanup(self) -> int: ...


class SqlRevocationRegistry:
    """
    Registry backed by the `revoked_tokens` table.

    Each call runs in its own short session so request transactions never hold
    revocation rows, and a duplicate insert only rolls back its own work.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def revoke(self, jti: str, exp: int) -> None:
        async with self._session_factory() as session:
            try:
                await RevokedTokenRepo(session).add(jti=jti, exp=exp)
                await session.commit()
            except IntegrityError:
                # Already revoked (double logout or a concurrent revoke of the same id).
                await session.rollback()
                log.info("token_already_revoked", jti=jti)
                return
        log.info("token_revoked", jti=jti, exp=exp)

    async def is_revoked(self, jti: str) -> bool:
        async with self._session_factory() as session:
            return await RevokedTokenRepo(session).exists(jti)

    async def cleanup(self) -> int:
        async with self._session_factory() as session:
            reaped = await RevokedTokenRepo(session).delete_expired(now=_now())
            await session.commit()
        return reaped


class InMemoryRevocationRegistry:
    """Process-local registry for tests and single-worker deployments."""

    def __init__(self) -> None:
        self._entries: dict[str, int] = {}
        self._lock = asyncio.Lock()

    async def revoke(self, jti: str, exp: int) -> None:
        async with self._lock:
            self._entries.setdefault(jti, exp)

    async def is_revoked(self, jti: str) -> bool:
        return jti in self._entries

    async def cleanup(self) -> int:
        now = _now()
        async with self._lock:
            expired = [jti for jti, exp in self._entries.items() if exp < now]
            for jti in expired:
                del self._entries[jti]
        return len(expired)


async def run_cleanup_loop(registry: RevocationRegistry, *, interval_seconds: float) -> None:
    """
    Periodic sweep; runs until cancelled. A failed sweep is logged and retried
    on the next tick.
    """

    while True:
        await asyncio.sleep(interval_seconds)
        try:
            reaped = await registry.cleanup()
        except Exception:
            log.exception("revocation_cleanup_failed")
            continue
        if reaped:
            log.info("revocation_cleanup", reaped=reaped)


# --- Module Notes -----------------------------------------------------------
# `is_revoked` is the only check that can reject a structurally valid, unexpired
# token; see `auth.validator.TokenValidator`.
