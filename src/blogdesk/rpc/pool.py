"""
blogdesk.rpc.pool

Owned broker connection with a bounded channel pool.

Responsibilities:
- Open the shared AMQP connection lazily, exactly once.
- Hand out short-lived channels, capped by a semaphore.
- Provide an explicit shutdown hook for the app lifespan.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

import aio_pika
from aio_pika.abc import AbstractChannel, AbstractConnection
from aio_pika.exceptions import AMQPError

from blogdesk.observability.logging import get_logger
from blogdesk.rpc.errors import ConnectionFailure

log = get_logger(__name__)

ConnectFactory = Callable[[str], Awaitable[AbstractConnection]]


class BrokerPool:
    """
    One connection per process, many channels.

    Lifecycle: created unconnected; the first `channel()` connects; `close()`
    tears the connection down and the pool refuses further use.
    """

    def __init__(
        self,
        *,
        url: str,
        max_channels: int = 32,
        connect: ConnectFactory | None = None,
    ) -> None:
        if max_channels < 1:
            raise ValueError("max_channels must be >= 1")
        self._url = url
        self._connect = connect or aio_pika.connect_robust
        self._connection: AbstractConnection | None = None
        self._lock = asyncio.Lock()
        self._slots = asyncio.Semaphore(max_channels)
        self._closed = False

    @property
    def is_connected(self) -> bool:
        return self._connection is not None and not self._connection.is_closed

    async def connection(self) -> AbstractConnection:
        if self._closed:
            raise ConnectionFailure("Broker pool is closed")
        if self._connection is not None:
            return self._connection

        async with self._lock:
            if self._closed:
                raise ConnectionFailure("Broker pool is closed")
            # Another caller may have connected while we waited on the lock.
            if self._connection is None:
                try:
                    self._connection = await self._connect(self._url)
                except (AMQPError, OSError) as e:
                    log.error("broker_connect_failed", error=str(e))
                    raise ConnectionFailure(f"Cannot connect to broker: {e}") from e
                log.info("broker_connected")
        return self._connection

    @asynccontextmanager
    async def channel(self) -> AsyncIterator[AbstractChannel]:
        async with self._slots:
            conn = await self.connection()
            try:
                ch = await conn.channel()
            except (AMQPError, OSError) as e:
                raise ConnectionFailure(f"Cannot open broker channel: {e}") from e
            try:
                yield ch
            finally:
                if not ch.is_closed:
                    try:
                        await ch.close()
                    except (AMQPError, OSError) as e:
                        log.warning("rpc_channel_close_failed", error=str(e))

    async def close(self) -> None:
        self._closed = True
        async with self._lock:
            conn, self._connection = self._connection, None
        if conn is not None and not conn.is_closed:
            await conn.close()
            log.info("broker_closed")


# --- Module Notes -----------------------------------------------------------
# The pool is owned by the FastAPI app (see `api.app`), not a module global, so
# tests can build isolated pools around an in-memory broker.
