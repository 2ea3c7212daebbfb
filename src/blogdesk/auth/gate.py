"""
blogdesk.auth.gate

Authorization gate: bearer token -> Identity -> minimum-rank check.

Responsibilities:
- `authenticate`: parse the Authorization header, verify the JWT, and rebuild
  the caller's identity from the store.
- `require_rank`: re-read the caller's rank from the store and compare it with
  a threshold.

Per request: Unauthenticated -> Authenticated -> Authorized | Forbidden.
Role claims inside tokens are never trusted, so a role change or an account
deletion takes effect on the next request without reissuing tokens.
"""

from __future__ import annotations

from typing import Protocol

from blogdesk.auth.errors import Forbidden, IdentityGone, InvalidToken, Unauthenticated
from blogdesk.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from blogdesk.auth.models import Identity
from blogdesk.db.repositories.users import UserWithRole

_SCHEME = "bearer"


class IdentityStore(Protocol):
    async def get_with_role(self, user_id: int) -> UserWithRole | None: ...

    async def role_rank(self, user_id: int) -> int | None: ...


def bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise Unauthenticated()
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != _SCHEME or not token or " " in token:
        raise Unauthenticated()
    return token


async def authenticate(
    authorization: str | None,
    *,
    cfg: JwtConfig,
    users: IdentityStore,
) -> Identity:
    token = bearer_token(authorization)

    try:
        payload = decode_and_validate(cfg=cfg, token=token)
    except JwtValidationError as e:
        raise InvalidToken(f"Invalid token: {e}") from e

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise InvalidToken("Invalid token subject") from e

    found = await users.get_with_role(user_id)
    if found is None:
        raise IdentityGone()
    return Identity(id=found.user.id, email=found.user.email, role_rank=found.role_id)


async def require_rank(identity: Identity, minimum: int, *, users: IdentityStore) -> Identity:
    rank = await users.role_rank(identity.id)
    if rank is None or rank < minimum:
        raise Forbidden()
    if rank != identity.role_rank:
        return Identity(id=identity.id, email=identity.email, role_rank=rank)
    return identity


# --- Module Notes -----------------------------------------------------------
# Both checks hit the store. Do not cache ranks beyond a single request.
