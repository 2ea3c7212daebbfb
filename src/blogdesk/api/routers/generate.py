"""
blogdesk.api.routers.generate

Content generation, delegated to the `news_generator` worker over broker RPC.

Responsibilities:
- Map the request body onto the worker's positional arguments.
- Return the worker reply verbatim; report RPC failures as `{"error": ...}`.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR, HTTP_504_GATEWAY_TIMEOUT

from blogdesk.api.deps import rpc_client
from blogdesk.observability.logging import get_logger
from blogdesk.rpc.client import RpcClient
from blogdesk.rpc.errors import RpcError, RpcTimeout

log = get_logger(__name__)

router = APIRouter(prefix="/api/generate", tags=["generate"])

SERVICE_NAME = "news_generator"
METHOD_NAME = "generate"


class GenerateRequest(BaseModel):
    # Field names mirror the worker's signature, hence snake_case on the wire.
    urls: list[str] = Field(min_length=1)
    llm: str | None = None
    length: int | None = Field(default=None, ge=1)
    custom_prompt: str | None = None
    temperature: float | None = Field(default=None, ge=0, le=2)

    def rpc_args(self) -> list[Any]:
        return [self.urls, self.llm, self.length, self.custom_prompt, self.temperature]


@router.post("")
async def generate_content(
    body: GenerateRequest,
    client: RpcClient = Depends(rpc_client),
) -> Any:
    try:
        return await client.call(SERVICE_NAME, METHOD_NAME, body.rpc_args())
    except RpcTimeout as e:
        return JSONResponse(status_code=HTTP_504_GATEWAY_TIMEOUT, content={"error": str(e)})
    except RpcError as e:
        log.error("generate_failed", error_type=type(e).__name__, error=str(e))
        return JSONResponse(status_code=HTTP_500_INTERNAL_SERVER_ERROR, content={"error": str(e)})


# --- Module Notes -----------------------------------------------------------
# The endpoint is public, like the rest of the read/write surface used by the
# marketing site; put it behind `require_rank` if the worker becomes costly.
