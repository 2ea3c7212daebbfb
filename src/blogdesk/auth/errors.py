"""
blogdesk.auth.errors

Failure kinds of the authorization gate.

The HTTP layer collapses the first three into 401 and `Forbidden` into 403; the
distinct kinds exist for logging and tests.
"""

from __future__ import annotations


class AuthError(Exception):
    status_code: int = 401
    message: str = "Unauthorized"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class Unauthenticated(AuthError):
    message = "No valid authorization header"


class InvalidToken(AuthError):
    message = "Invalid token"


class IdentityGone(AuthError):
    message = "User no longer exists"


class Forbidden(AuthError):
    status_code = 403
    message = "Insufficient permissions"
