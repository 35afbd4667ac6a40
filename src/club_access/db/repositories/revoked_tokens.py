from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from club_access.db.models import RevokedToken


class RevokedTokenRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, *, jti: str, exp: int) -> RevokedToken:
        row = RevokedToken(jti=jti, exp=exp)
        self._session.add(row)
        await self._session.flush()
        return row

    async def exists(self, jti: str) -> bool:
        stmt = select(RevokedToken.jti).where(RevokedToken.jti == jti).limit(1)
        return (await self._session.execute(stmt)).scalar_one_or_none() is not None

    async def delete_expired(self, *, now: int) -> int:
        result = await self._session.execute(delete(RevokedToken).where(RevokedToken.exp < now))
        return result.rowcount or 0
