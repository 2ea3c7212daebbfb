"""
blogdesk.api.routers.blog

Blog post endpoints under `/api/blog`.

Responsibilities:
- Public reads (listing and single post, with author summary).
- Author-only create/edit of their own posts.
- Delete by the owning author or an admin.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_204_NO_CONTENT,
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
)

from blogdesk.api.deps import db_session
from blogdesk.api.schemas import CamelModel
from blogdesk.auth.deps import get_identity
from blogdesk.auth.models import Identity
from blogdesk.db.models import Author, Post, RoleRank
from blogdesk.db.repositories.authors import AuthorRepo
from blogdesk.db.repositories.posts import PostRepo

router = APIRouter(prefix="/api/blog", tags=["blog"])

_REQUIRED_FIELDS = "Title, description, and content are required"


class PostAuthor(CamelModel):
    id: int
    name: str
    description: str | None


class PostResponse(CamelModel):
    id: int
    title: str
    description: str
    content: str | None
    image: str | None
    author_id: int
    author: PostAuthor
    created_at: datetime
    updated_at: datetime


class PostWriteRequest(CamelModel):
    # Required-ness is checked by hand so every missing field yields the same message.
    title: str | None = Field(default=None, max_length=70)
    description: str | None = Field(default=None, max_length=255)
    content: str | None = None
    image: str | None = None


def _to_response(p: Post) -> PostResponse:
    return PostResponse(
        id=p.id,
        title=p.title,
        description=p.description,
        content=p.content,
        image=p.image,
        author_id=p.author_id,
        author=PostAuthor(
            id=p.author.id, name=p.author.user.name, description=p.author.description
        ),
        created_at=p.created_at,
        updated_at=p.updated_at,
    )


def _require_fields(body: PostWriteRequest) -> tuple[str, str, str]:
    if not body.title or not body.description or not body.content:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=_REQUIRED_FIELDS)
    return body.title, body.description, body.content


async def _caller_author(session: AsyncSession, identity: Identity, action: str) -> Author:
    author = await AuthorRepo(session).get_by_user(identity.id)
    if author is None:
        raise HTTPException(
            status_code=HTTP_403_FORBIDDEN, detail=f"Only authors can {action} posts"
        )
    return author


@router.get("/posts", response_model=list[PostResponse])
async def list_posts(session: AsyncSession = Depends(db_session)) -> list[PostResponse]:
    return [_to_response(p) for p in await PostRepo(session).list_all()]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, session: AsyncSession = Depends(db_session)) -> PostResponse:
    post = await PostRepo(session).get(post_id)
    if post is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Post not found")
    return _to_response(post)


@router.post("", response_model=PostResponse, status_code=HTTP_201_CREATED)
async def create_post(
    body: PostWriteRequest,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(db_session),
) -> PostResponse:
    author = await _caller_author(session, identity, "create")
    title, description, content = _require_fields(body)

    post = await PostRepo(session).create(
        author_id=author.id,
        title=title,
        description=description,
        content=content,
        image=body.image,
    )
    await session.commit()
    return _to_response(post)


@router.put("/edit/{post_id}", response_model=PostResponse)
async def edit_post(
    post_id: int,
    body: PostWriteRequest,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(db_session),
) -> PostResponse:
    posts = PostRepo(session)
    post = await posts.get(post_id)
    if post is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Post not found")

    author = await _caller_author(session, identity, "edit")
    if post.author_id != author.id:
        raise HTTPException(
            status_code=HTTP_403_FORBIDDEN, detail="You can only edit your own posts"
        )
    title, description, content = _require_fields(body)

    await posts.update(
        post, title=title, description=description, content=content, image=body.image
    )
    await session.commit()
    return _to_response(post)


@router.delete("/{post_id}", status_code=HTTP_204_NO_CONTENT, response_class=Response)
async def delete_post(
    post_id: int,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(db_session),
) -> Response:
    posts = PostRepo(session)
    post = await posts.get(post_id)
    if post is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Post not found")

    author = await AuthorRepo(session).get_by_user(identity.id)
    owns = author is not None and author.id == post.author_id
    # Admins may remove any post.
    if not owns and (identity.role_rank or 0) < RoleRank.admin:
        raise HTTPException(
            status_code=HTTP_403_FORBIDDEN, detail="You can only delete your own posts"
        )

    await posts.delete(post)
    await session.commit()
    return Response(status_code=HTTP_204_NO_CONTENT)
