"""
blogdesk.api.routers.authors

Author profiles under `/api/blog/author`.

Responsibilities:
- Public listing and lookup.
- Admin-only creation of a profile for an existing user (one per user).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_404_NOT_FOUND, HTTP_409_CONFLICT

from blogdesk.api.deps import db_session
from blogdesk.api.schemas import CamelModel
from blogdesk.auth.deps import require_rank
from blogdesk.db.models import Author, RoleRank
from blogdesk.db.repositories.authors import AuthorRepo
from blogdesk.db.repositories.users import UserRepo

# Mounted before the blog router so `/api/blog/author` never reaches `/api/blog/{post_id}`.
router = APIRouter(prefix="/api/blog/author", tags=["authors"])


class AuthorResponse(CamelModel):
    id: int
    user_id: int
    name: str
    description: str | None
    network: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime


class AuthorCreateRequest(CamelModel):
    user_id: int
    description: str | None = Field(default=None, max_length=300)
    network: dict[str, Any] | None = None


def _to_response(a: Author) -> AuthorResponse:
    return AuthorResponse(
        id=a.id,
        user_id=a.user_id,
        name=a.user.name,
        description=a.description,
        network=a.network,
        created_at=a.created_at,
        updated_at=a.updated_at,
    )


@router.get("", response_model=list[AuthorResponse])
async def list_authors(session: AsyncSession = Depends(db_session)) -> list[AuthorResponse]:
    return [_to_response(a) for a in await AuthorRepo(session).list_all()]


@router.get("/{author_id}", response_model=AuthorResponse)
async def get_author(author_id: int, session: AsyncSession = Depends(db_session)) -> AuthorResponse:
    author = await AuthorRepo(session).get(author_id)
    if author is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Author not found")
    return _to_response(author)


@router.post(
    "",
    response_model=AuthorResponse,
    status_code=HTTP_201_CREATED,
    dependencies=[Depends(require_rank(RoleRank.admin))],
)
async def create_author(
    body: AuthorCreateRequest,
    session: AsyncSession = Depends(db_session),
) -> AuthorResponse:
    if await UserRepo(session).get(body.user_id) is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    authors = AuthorRepo(session)
    if await authors.get_by_user(body.user_id) is not None:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="User is already an author")

    author = await authors.create(
        user_id=body.user_id, description=body.description, network=body.network
    )
    await session.commit()
    await session.refresh(author)
    return _to_response(author)
