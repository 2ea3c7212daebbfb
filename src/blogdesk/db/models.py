"""
blogdesk.db.models

Persistence schema for the blogging platform.

Responsibilities:
- Define ORM models:
  - User / Role / UserRole: accounts and their single role assignment
  - Author: public author profile bound to a user
  - Post: blog posts written by an author
  - Newsletter: newsletter subscriptions
- Define the `RoleRank` ordering used by the authorization gate.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogdesk.db.base import Base


def _utcnow() -> datetime:
    # Persist naive UTC timestamps for simplicity.
    return datetime.utcnow()


class RoleRank(enum.IntEnum):
    # Role ids double as ranks: a higher number means more privilege.
    staff = 1
    admin = 2
    ceo = 3


ROLE_DESCRIPTIONS: dict[RoleRank, str] = {
    RoleRank.staff: "Regular staff member",
    RoleRank.admin: "Administrator",
    RoleRank.ceo: "Chief Executive Officer",
}


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(75), nullable=False, unique=True)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)


class UserRole(Base):
    __tablename__ = "users_roles"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), primary_key=True)
    role_id: Mapped[int] = mapped_column(ForeignKey("roles.id"), primary_key=True)


class Author(Base):
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(primary_key=True)
    description: Mapped[str | None] = mapped_column(String(300), nullable=True)
    # Free-form social links, e.g. {"twitter": "...", "github": "..."}.
    network: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    user: Mapped[User] = relationship(lazy="joined")


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(70), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    author_id: Mapped[int] = mapped_column(ForeignKey("authors.id"), nullable=False, index=True)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    author: Mapped[Author] = relationship(lazy="joined")


class Newsletter(Base):
    __tablename__ = "newsletters"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(75), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


# --- Module Notes -----------------------------------------------------------
# `users_roles` keeps the composite key of a junction table, but the repositories
# maintain exactly one row per user (see `repositories.users.UserRepo.assign_role`).
