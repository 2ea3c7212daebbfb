"""
blogdesk.api.routers.auth

Account endpoints under `/api/auth/user`.

Responsibilities:
- Login (email + password -> JWT).
- Current user profile.
- Admin-only registration of lower-ranked users.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import EmailStr, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
)

from blogdesk.api.deps import db_session, settings_dep
from blogdesk.api.schemas import CamelModel
from blogdesk.auth.deps import get_identity, require_rank
from blogdesk.auth.jwt import issue_token, jwt_config
from blogdesk.auth.models import Identity
from blogdesk.auth.passwords import hash_password, verify_password
from blogdesk.db.models import RoleRank
from blogdesk.db.repositories.users import UserRepo
from blogdesk.observability.logging import get_logger
from blogdesk.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/api/auth/user", tags=["auth"])


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class LoginUser(CamelModel):
    id: int
    name: str
    email: str
    role_id: int | None


class LoginResponse(CamelModel):
    message: str = "Login successful"
    user: LoginUser
    token: str


class ProfileResponse(CamelModel):
    id: int
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


class RegisterRequest(CamelModel):
    name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)
    role_id: int = RoleRank.staff.value


class RegisteredUser(CamelModel):
    id: int
    name: str
    email: str
    created_at: datetime


class RegisterResponse(CamelModel):
    message: str = "User created successfully"
    user: RegisteredUser


@router.get("", response_model=ProfileResponse)
async def get_current_user(
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(db_session),
) -> ProfileResponse:
    user = await UserRepo(session).get(identity.id)
    if user is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return ProfileResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> LoginResponse:
    found = await UserRepo(session).get_by_email_with_role(body.email)
    if found is None or not verify_password(body.password, found.user.hashed_password):
        log.info("login_failed")
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    user = found.user
    token = issue_token(cfg=jwt_config(settings), user_id=user.id, email=user.email)
    log.info("login_succeeded", user_id=user.id)
    return LoginResponse(
        user=LoginUser(id=user.id, name=user.name, email=user.email, role_id=found.role_id),
        token=token,
    )


@router.post("/register", response_model=RegisterResponse, status_code=HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    caller: Identity = Depends(require_rank(RoleRank.admin)),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> RegisterResponse:
    users = UserRepo(session)
    if await users.get_by_email(body.email) is not None:
        raise HTTPException(
            status_code=HTTP_409_CONFLICT, detail="User with this email already exists"
        )
    if body.role_id not in {r.value for r in RoleRank}:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Invalid role ID")
    # Nobody can mint a peer or a superior.
    if not caller.outranks(body.role_id):
        raise HTTPException(
            status_code=HTTP_403_FORBIDDEN,
            detail="Cannot create users with equal or higher privileges than yourself",
        )

    hashed = hash_password(body.password, rounds=settings.bcrypt_rounds)
    try:
        user = await users.create(name=body.name, email=body.email, hashed_password=hashed)
        await users.assign_role(user.id, body.role_id)
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(
            status_code=HTTP_409_CONFLICT, detail="User with this email already exists"
        ) from e

    log.info("user_registered", user_id=user.id, role_id=body.role_id, by=caller.id)
    return RegisterResponse(user=RegisteredUser.model_validate(user))
