"""
blogdesk.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and DB sessions.
- Expose the app-owned broker pool as a ready `RpcClient`.
- Encapsulate app.state access patterns (settings/sessionmaker/broker).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blogdesk.rpc.client import RpcClient
from blogdesk.rpc.pool import BrokerPool
from blogdesk.settings import Settings


def settings_dep(request: Request) -> Settings:
    # Settings passed to `create_app` win over the process-wide cached instance.
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # The sessionmaker is created on app startup in `blogdesk.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Routers commit explicitly.
    async with session_factory() as session:
        yield session


def broker_pool(request: Request) -> BrokerPool:
    return request.app.state.broker  # type: ignore[attr-defined]


def rpc_client(
    pool: BrokerPool = Depends(broker_pool),
    settings: Settings = Depends(settings_dep),
) -> RpcClient:
    return RpcClient(
        pool=pool,
        exchange=settings.rpc_exchange,
        timeout=settings.rpc_timeout_seconds,
    )
