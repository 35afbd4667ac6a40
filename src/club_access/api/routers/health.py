"""
club_access.api.routers.health

Liveness and readiness probes.

Responsibilities:
- `/healthz`: the process serves HTTP.
- `/readyz`: the credential store answers and the revocation registry can be read.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from club_access import __version__
from club_access.api.deps import container_dep, db_session
from club_access.container import AuthContainer

router = APIRouter()


@router.get("/healthz", name="health.liveness")
async def healthz(container: AuthContainer = Depends(container_dep)) -> dict[str, str]:
    return {"status": "ok", "service": container.settings.service_name, "version": __version__}


@router.get("/readyz", name="health.readiness")
async def readyz(
    session: AsyncSession = Depends(db_session),
    container: AuthContainer = Depends(container_dep),
) -> dict[str, str]:
    await session.execute(text("SELECT 1"))
    # A registry that cannot be read would reject every token.
    await container.revocations.is_revoked("readyz-probe")
    return {"status": "ready"}
