"""
blogdesk.db.repositories.roles

Repository for the fixed role catalogue.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.db.models import Role


class RoleRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[Role]:
        stmt = select(Role).order_by(Role.id)
        return list((await self._session.execute(stmt)).scalars().all())
