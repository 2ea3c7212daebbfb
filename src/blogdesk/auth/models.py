"""
blogdesk.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Identity`) injected into endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Authenticated caller, rebuilt on every request.

    `role_rank` is whatever the store held when the request was authenticated;
    it is `None` for users without a role.
    """

    id: int
    email: str
    role_rank: int | None

    def outranks(self, rank: int | None) -> bool:
        # Strictly higher; a missing rank on either side counts as 0.
        return (self.role_rank or 0) > (rank or 0)
