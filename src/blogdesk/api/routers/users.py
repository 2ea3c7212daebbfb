"""
blogdesk.api.routers.users

User administration under `/api/users`.

Responsibilities:
- Admin-only listing and lookup, with each user's role id.
- Updates: self-service, or by a strictly higher-ranked caller.
- Role changes never apply to the caller's own account.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import EmailStr, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_403_FORBIDDEN, HTTP_404_NOT_FOUND, HTTP_409_CONFLICT

from blogdesk.api.deps import db_session, settings_dep
from blogdesk.api.schemas import CamelModel
from blogdesk.auth.deps import get_identity, require_rank
from blogdesk.auth.models import Identity
from blogdesk.auth.passwords import hash_password
from blogdesk.db.models import RoleRank
from blogdesk.db.repositories.users import UserRepo, UserWithRole
from blogdesk.settings import Settings

router = APIRouter(prefix="/api/users", tags=["users"])


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    role_id: int | None
    created_at: datetime
    updated_at: datetime


class UserUpdateRequest(CamelModel):
    name: str | None = Field(default=None, max_length=50)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=6)
    role_id: int | None = Field(default=None, ge=RoleRank.staff.value, le=RoleRank.ceo.value)


class UserUpdateResponse(CamelModel):
    message: str = "User updated successfully"
    user: UserResponse


def _to_response(row: UserWithRole) -> UserResponse:
    u = row.user
    return UserResponse(
        id=u.id,
        name=u.name,
        email=u.email,
        role_id=row.role_id,
        created_at=u.created_at,
        updated_at=u.updated_at,
    )


@router.get(
    "",
    response_model=list[UserResponse],
    dependencies=[Depends(require_rank(RoleRank.admin))],
)
async def list_users(session: AsyncSession = Depends(db_session)) -> list[UserResponse]:
    return [_to_response(r) for r in await UserRepo(session).list_with_roles()]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(require_rank(RoleRank.admin))],
)
async def get_user(user_id: int, session: AsyncSession = Depends(db_session)) -> UserResponse:
    row = await UserRepo(session).get_with_role(user_id)
    if row is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return _to_response(row)


@router.put("/{user_id}", response_model=UserUpdateResponse)
async def update_user(
    user_id: int,
    body: UserUpdateRequest,
    caller: Identity = Depends(get_identity),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> UserUpdateResponse:
    users = UserRepo(session)
    target = await users.get_with_role(user_id)
    if target is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")

    is_self = caller.id == user_id
    if not is_self:
        if not caller.outranks(target.role_id):
            raise HTTPException(
                status_code=HTTP_403_FORBIDDEN,
                detail="Cannot edit users with equal or higher privileges than yourself",
            )
        if body.role_id is not None and not caller.outranks(body.role_id):
            raise HTTPException(
                status_code=HTTP_403_FORBIDDEN,
                detail="Cannot assign role equal to or higher than your own",
            )

    if body.email and body.email != target.user.email:
        if await users.get_by_email(body.email) is not None:
            raise HTTPException(
                status_code=HTTP_409_CONFLICT, detail="User with this email already exists"
            )

    hashed = hash_password(body.password, rounds=settings.bcrypt_rounds) if body.password else None
    try:
        await users.update(target.user, name=body.name, email=body.email, hashed_password=hashed)
        # A user never changes their own role.
        if body.role_id is not None and not is_self:
            await users.assign_role(user_id, body.role_id)
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(
            status_code=HTTP_409_CONFLICT, detail="User with this email already exists"
        ) from e

    updated = await users.get_with_role(user_id)
    if updated is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return UserUpdateResponse(user=_to_response(updated))
