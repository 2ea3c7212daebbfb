"""
blogdesk.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) with DB connectivity validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.api.deps import broker_pool, db_session
from blogdesk.rpc.pool import BrokerPool

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    # Liveness: process is up and serving HTTP.
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(
    session: AsyncSession = Depends(db_session),
    broker: BrokerPool = Depends(broker_pool),
) -> dict[str, str]:
    # Readiness: the DB must answer. The broker connects lazily, so it is reported, not probed.
    await session.execute(text("SELECT 1"))
    return {"status": "ready", "broker": "connected" if broker.is_connected else "idle"}
