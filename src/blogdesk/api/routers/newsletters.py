"""
blogdesk.api.routers.newsletters

Newsletter subscriptions.

Responsibilities:
- Public subscribe endpoint (409 on duplicate email).
- Staff-only subscriber listing.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import EmailStr
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_409_CONFLICT

from blogdesk.api.deps import db_session
from blogdesk.api.schemas import CamelModel, MessageResponse
from blogdesk.auth.deps import require_rank
from blogdesk.db.models import RoleRank
from blogdesk.db.repositories.newsletters import NewsletterRepo
from blogdesk.observability.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/api/newsletter", tags=["newsletter"])


class SubscribeRequest(CamelModel):
    email: EmailStr


class SubscriptionResponse(CamelModel):
    id: int
    email: str
    created_at: datetime
    updated_at: datetime


@router.post("/subscribe", response_model=MessageResponse)
async def subscribe(
    body: SubscribeRequest,
    session: AsyncSession = Depends(db_session),
) -> MessageResponse:
    try:
        await NewsletterRepo(session).subscribe(body.email)
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(
            status_code=HTTP_409_CONFLICT,
            detail="This email is already subscribed to the newsletter",
        ) from e
    log.info("newsletter_subscribed")
    return MessageResponse(message="Successfully subscribed to newsletter")


@router.get(
    "",
    response_model=list[SubscriptionResponse],
    dependencies=[Depends(require_rank(RoleRank.staff))],
)
async def list_subscriptions(
    session: AsyncSession = Depends(db_session),
) -> list[SubscriptionResponse]:
    subs = await NewsletterRepo(session).list_all()
    return [SubscriptionResponse.model_validate(s) for s in subs]
