"""
blogdesk.db.repositories.newsletters

Repository for newsletter subscriptions.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.db.models import Newsletter


class NewsletterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def subscribe(self, email: str) -> Newsletter:
        # Duplicate emails surface as IntegrityError from the unique constraint.
        sub = Newsletter(email=email)
        self._session.add(sub)
        await self._session.flush()
        return sub

    async def list_all(self) -> list[Newsletter]:
        stmt = select(Newsletter).order_by(Newsletter.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def count(self) -> int:
        stmt = select(func.count()).select_from(Newsletter)
        return (await self._session.execute(stmt)).scalar_one()
