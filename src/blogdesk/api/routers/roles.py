"""
blogdesk.api.routers.roles

Read-only role catalogue for staff and above.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.api.deps import db_session
from blogdesk.api.schemas import CamelModel
from blogdesk.auth.deps import require_rank
from blogdesk.db.models import RoleRank
from blogdesk.db.repositories.roles import RoleRepo

router = APIRouter(prefix="/api/roles", tags=["roles"])


class RoleResponse(CamelModel):
    id: int
    name: str
    description: str | None


@router.get(
    "",
    response_model=list[RoleResponse],
    dependencies=[Depends(require_rank(RoleRank.staff))],
)
async def list_roles(session: AsyncSession = Depends(db_session)) -> list[RoleResponse]:
    return [RoleResponse.model_validate(r) for r in await RoleRepo(session).list_all()]
