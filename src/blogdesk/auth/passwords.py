"""
blogdesk.auth.passwords

Password hashing (passlib + bcrypt).
"""

from __future__ import annotations

from functools import lru_cache

from passlib.context import CryptContext


@lru_cache(maxsize=8)
def password_context(rounds: int = 10) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def hash_password(password: str, *, rounds: int = 10) -> str:
    return password_context(rounds).hash(password)


def verify_password(password: str, hashed: str) -> bool:
    # Verification reads the cost factor from the hash itself.
    return password_context().verify(password, hashed)
