"""
blogdesk.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer token into a typed `Identity` (via `auth.gate`).
- Enforce minimum role ranks via a reusable dependency factory.
- Map gate failures to 401/403 responses.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.api.deps import db_session, settings_dep
from blogdesk.auth import gate
from blogdesk.auth.errors import AuthError
from blogdesk.auth.jwt import jwt_config
from blogdesk.auth.models import Identity
from blogdesk.db.repositories.users import UserRepo
from blogdesk.observability.logging import get_logger
from blogdesk.settings import Settings

log = get_logger(__name__)


def _reject(e: AuthError) -> HTTPException:
    # Callers only see the generic message of each kind; details go to the log.
    log.info("auth_rejected", kind=type(e).__name__, reason=str(e))
    return HTTPException(status_code=e.status_code, detail=type(e).message)


async def get_identity(
    authorization: str | None = Header(default=None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> Identity:
    try:
        return await gate.authenticate(
            authorization, cfg=jwt_config(settings), users=UserRepo(session)
        )
    except AuthError as e:
        raise _reject(e) from e


def require_rank(minimum: int):
    async def _dep(
        identity: Identity = Depends(get_identity),
        session: AsyncSession = Depends(db_session),
    ) -> Identity:
        try:
            return await gate.require_rank(identity, minimum, users=UserRepo(session))
        except AuthError as e:
            raise _reject(e) from e

    _dep.__name__ = f"require_rank_{minimum}"
    return _dep


# --- Module Notes -----------------------------------------------------------
# Typical use:
#   @router.get("/", dependencies=[Depends(require_rank(RoleRank.admin))])
# or inject the returned Identity when the handler needs the caller's rank.
