"""
blogdesk.api.schemas

Shared request/response base models.

Responsibilities:
- camelCase wire format for JSON bodies (snake_case in Python).
- Message envelope used by mutating endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    message: str
