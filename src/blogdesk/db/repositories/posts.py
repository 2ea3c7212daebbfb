"""
blogdesk.db.repositories.posts

Repository for `Post` entities.

Responsibilities:
- Read posts together with their author (and the author's user name).
- Create, update, and delete posts.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.db.models import Post


class PostRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[Post]:
        # Newest first for the public listing.
        stmt = select(Post).order_by(Post.created_at.desc(), Post.id.desc())
        return list((await self._session.execute(stmt)).unique().scalars().all())

    async def get(self, post_id: int) -> Post | None:
        return await self._session.get(Post, post_id)

    async def create(
        self,
        *,
        author_id: int,
        title: str,
        description: str,
        content: str,
        image: str | None = None,
    ) -> Post:
        post = Post(
            author_id=author_id,
            title=title,
            description=description,
            content=content,
            image=image or None,
        )
        self._session.add(post)
        await self._session.flush()
        await self._session.refresh(post)
        return post

    async def update(
        self,
        post: Post,
        *,
        title: str,
        description: str,
        content: str,
        image: str | None = None,
    ) -> Post:
        post.title = title
        post.description = description
        post.content = content
        post.image = image or None
        post.updated_at = datetime.utcnow()
        await self._session.flush()
        return post

    async def delete(self, post: Post) -> None:
        await self._session.delete(post)
        await self._session.flush()

    async def count(self) -> int:
        return (await self._session.execute(select(func.count()).select_from(Post))).scalar_one()
