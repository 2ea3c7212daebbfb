from __future__ import annotations

import pytest

from blogdesk.auth.passwords import hash_password, verify_password
from blogdesk.db.models import RoleRank, UserRole
from blogdesk.db.repositories.roles import RoleRepo
from blogdesk.db.repositories.users import UserRepo
from blogdesk.db.seed import seed_roles
from conftest import make_user


@pytest.mark.asyncio
async def test_role_seed_is_idempotent(sessionmaker):
    async with sessionmaker() as session:
        assert await seed_roles(session) == 0
        roles = await RoleRepo(session).list_all()
    assert [(r.id, r.name) for r in roles] == [(1, "staff"), (2, "admin"), (3, "ceo")]


@pytest.mark.asyncio
async def test_assign_role_replaces_previous(sessionmaker):
    user = await make_user(sessionmaker, email="r@example.com", role=RoleRank.staff)
    async with sessionmaker() as session:
        users = UserRepo(session)
        await users.assign_role(user.id, RoleRank.ceo)
        await session.commit()
        assert await users.role_rank(user.id) == RoleRank.ceo


@pytest.mark.asyncio
async def test_several_role_rows_resolve_to_lowest(sessionmaker):
    user = await make_user(sessionmaker, email="multi@example.com", role=RoleRank.ceo)
    async with sessionmaker() as session:
        session.add(UserRole(user_id=user.id, role_id=RoleRank.staff))
        await session.commit()

    async with sessionmaker() as session:
        users = UserRepo(session)
        assert await users.role_rank(user.id) == RoleRank.staff
        assert (await users.get_with_role(user.id)).role_id == RoleRank.staff


@pytest.mark.asyncio
async def test_role_rank_of_unassigned_user_is_none(sessionmaker):
    user = await make_user(sessionmaker, email="none@example.com", role=None)
    async with sessionmaker() as session:
        assert await UserRepo(session).role_rank(user.id) is None


def test_password_hashing():
    hashed = hash_password("hunter22", rounds=4)
    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("hunter23", hashed)
