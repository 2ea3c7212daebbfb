"""
blogdesk.db.repositories.users

Repository for `User` accounts and their role assignment.

Responsibilities:
- Point reads used by the authorization gate (identity, current rank).
- Account CRUD for the auth/users routers.
- Maintain a single `users_roles` row per user.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.db.models import User, UserRole


@dataclass(frozen=True, slots=True)
class UserWithRole:
    user: User
    role_id: int | None


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _rank_subquery(self):
        # Lowest assigned rank per user; a user should hold one row, but legacy
        # data with several rows resolves to the least privilege.
        return (
            select(UserRole.user_id, func.min(UserRole.role_id).label("role_id"))
            .group_by(UserRole.user_id)
            .subquery()
        )

    async def get(self, user_id: int) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def role_rank(self, user_id: int) -> int | None:
        stmt = select(func.min(UserRole.role_id)).where(UserRole.user_id == user_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_with_role(self, user_id: int) -> UserWithRole | None:
        ranks = self._rank_subquery()
        stmt = (
            select(User, ranks.c.role_id)
            .outerjoin(ranks, ranks.c.user_id == User.id)
            .where(User.id == user_id)
        )
        row = (await self._session.execute(stmt)).one_or_none()
        if row is None:
            return None
        return UserWithRole(user=row[0], role_id=row[1])

    async def get_by_email_with_role(self, email: str) -> UserWithRole | None:
        ranks = self._rank_subquery()
        stmt = (
            select(User, ranks.c.role_id)
            .outerjoin(ranks, ranks.c.user_id == User.id)
            .where(User.email == email)
        )
        row = (await self._session.execute(stmt)).one_or_none()
        if row is None:
            return None
        return UserWithRole(user=row[0], role_id=row[1])

    async def list_with_roles(self) -> list[UserWithRole]:
        ranks = self._rank_subquery()
        stmt = (
            select(User, ranks.c.role_id)
            .outerjoin(ranks, ranks.c.user_id == User.id)
            .order_by(User.id)
        )
        rows = (await self._session.execute(stmt)).all()
        return [UserWithRole(user=u, role_id=r) for u, r in rows]

    async def create(self, *, name: str, email: str, hashed_password: str) -> User:
        user = User(name=name, email=email, hashed_password=hashed_password)
        self._session.add(user)
        await self._session.flush()
        return user

    async def update(
        self,
        user: User,
        *,
        name: str | None = None,
        email: str | None = None,
        hashed_password: str | None = None,
    ) -> User:
        if name:
            user.name = name
        if email:
            user.email = email
        if hashed_password:
            user.hashed_password = hashed_password
        user.updated_at = datetime.utcnow()
        await self._session.flush()
        return user

    async def assign_role(self, user_id: int, role_id: int) -> None:
        # Replace, never accumulate.
        await self._session.execute(delete(UserRole).where(UserRole.user_id == user_id))
        self._session.add(UserRole(user_id=user_id, role_id=role_id))
        await self._session.flush()

    async def delete(self, user_id: int) -> None:
        await self._session.execute(delete(UserRole).where(UserRole.user_id == user_id))
        await self._session.execute(delete(User).where(User.id == user_id))
        await self._session.flush()

    async def count(self) -> int:
        return (await self._session.execute(select(func.count()).select_from(User))).scalar_one()


# --- Module Notes -----------------------------------------------------------
# `role_rank` is the read the authorization gate performs on every request; it
# must stay a cheap indexed point lookup (users_roles PK starts with user_id).
