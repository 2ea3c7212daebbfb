"""
blogdesk.auth.jwt

JWT issuing and validation helpers.

Responsibilities:
- Issue login tokens (24h by default) carrying only the subject and email.
- Decode and validate JWTs with strict claim requirements (iss/aud/exp/iat/sub).

Note:
- Tokens deliberately carry no role claim; the gate reads the rank from the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from blogdesk.settings import Settings


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    audience: str
    secret: str | None
    ttl: timedelta = timedelta(hours=24)


class JwtValidationError(Exception):
    pass


class SigningKeyMissing(RuntimeError):
    def __init__(self) -> None:
        super().__init__("JWT signing secret is not configured (BLOGDESK_JWT_SECRET)")


def jwt_config(settings: Settings) -> JwtConfig:
    return JwtConfig(
        alg=settings.jwt_alg,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        secret=settings.jwt_secret,
        ttl=timedelta(hours=settings.jwt_ttl_hours),
    )


def _secret(cfg: JwtConfig) -> str:
    if not cfg.secret:
        raise SigningKeyMissing()
    return cfg.secret


def issue_token(
    *,
    cfg: JwtConfig,
    user_id: int,
    email: str,
    ttl: timedelta | None = None,
    now: datetime | None = None,
) -> str:
    issued = now or datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": str(user_id),
        "email": email,
        "iat": int(issued.timestamp()),
        "exp": int((issued + (ttl or cfg.ttl)).timestamp()),
    }
    return jwt.encode(payload, _secret(cfg), algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    secret = _secret(cfg)
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={
                "require": ["exp", "iat", "iss", "aud", "sub"],
            },
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by `api/routers/auth.py` (login); validation by `auth.gate`.
