"""
blogdesk.db.repositories.authors

Repository for `Author` profiles (loaded with their user).
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.db.models import Author


class AuthorRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[Author]:
        stmt = select(Author).order_by(Author.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def get(self, author_id: int) -> Author | None:
        return await self._session.get(Author, author_id)

    async def get_by_user(self, user_id: int) -> Author | None:
        stmt = select(Author).where(Author.user_id == user_id).order_by(Author.id).limit(1)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def create(
        self,
        *,
        user_id: int,
        description: str | None = None,
        network: dict[str, Any] | None = None,
    ) -> Author:
        author = Author(user_id=user_id, description=description, network=network)
        self._session.add(author)
        await self._session.flush()
        return author
