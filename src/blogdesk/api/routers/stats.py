"""
blogdesk.api.routers.stats

Public aggregate counters for the dashboard landing page.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.api.deps import db_session
from blogdesk.api.schemas import CamelModel
from blogdesk.db.repositories.newsletters import NewsletterRepo
from blogdesk.db.repositories.posts import PostRepo
from blogdesk.db.repositories.users import UserRepo

router = APIRouter(prefix="/api/stats", tags=["stats"])


class Stats(CamelModel):
    total_posts: int
    total_newsletter_subscribers: int
    total_users: int


class StatsResponse(BaseModel):
    stats: Stats


@router.get("", response_model=StatsResponse)
async def get_stats(session: AsyncSession = Depends(db_session)) -> StatsResponse:
    return StatsResponse(
        stats=Stats(
            total_posts=await PostRepo(session).count(),
            total_newsletter_subscribers=await NewsletterRepo(session).count(),
            total_users=await UserRepo(session).count(),
        )
    )
