"""
blogdesk.rpc.client

Request/reply RPC over an AMQP topic exchange (nameko wire convention).

Responsibilities:
- Publish `{"args": [...], "kwargs": {}}` to `<service>.<method>`.
- Correlate the reply on a private, exclusive reply queue.
- Enforce a per-call deadline and release broker resources on every exit.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from collections.abc import Sequence
from typing import Any

from aio_pika import ExchangeType, Message
from aio_pika.abc import AbstractIncomingMessage
from aio_pika.exceptions import AMQPError

from blogdesk.observability.logging import get_logger
from blogdesk.rpc.errors import ConsumeFailure, RpcTimeout
from blogdesk.rpc.pool import BrokerPool

log = get_logger(__name__)

DEFAULT_EXCHANGE = "nameko-rpc"


def new_correlation_id() -> str:
    # 128 random bits.
    return uuid.uuid4().hex


def encode_request(args: Sequence[Any]) -> bytes:
    return json.dumps({"args": list(args), "kwargs": {}}).encode("utf-8")


class RpcClient:
    """
    Client for nameko-style RPC services.

    Every call gets its own channel from the pool and its own reply queue, so
    concurrent calls never see each other's replies.
    """

    def __init__(
        self,
        *,
        pool: BrokerPool,
        exchange: str = DEFAULT_EXCHANGE,
        timeout: float | None = None,
    ) -> None:
        self._pool = pool
        self._exchange = exchange
        self._timeout = timeout

    async def call(
        self,
        service_name: str,
        method_name: str,
        args: Sequence[Any] = (),
        *,
        timeout: float | None = None,
    ) -> Any:
        if not service_name or not method_name:
            raise ValueError("service_name and method_name must be non-empty")

        routing_key = f"{service_name}.{method_name}"
        deadline = timeout if timeout is not None else self._timeout
        correlation_id = new_correlation_id()
        loop = asyncio.get_running_loop()
        reply: asyncio.Future[Any] = loop.create_future()

        async def on_message(message: AbstractIncomingMessage) -> None:
            # First matching reply wins; strays and duplicates are dropped.
            if message.correlation_id != correlation_id or reply.done():
                return
            try:
                reply.set_result(json.loads(message.body))
            except ValueError as e:
                reply.set_exception(ConsumeFailure(f"Malformed reply body: {e}"))

        async with self._pool.channel() as channel:
            try:
                exchange = await channel.declare_exchange(
                    self._exchange, ExchangeType.TOPIC, durable=True
                )
                queue = await channel.declare_queue(exclusive=True, auto_delete=True)
                await queue.bind(exchange, routing_key=queue.name)
                consumer_tag = await queue.consume(on_message, no_ack=True)
            except AMQPError as e:
                raise ConsumeFailure(f"Error consuming messages: {e}") from e

            try:
                await exchange.publish(
                    Message(
                        body=encode_request(args),
                        content_type="application/json",
                        content_encoding="utf-8",
                        correlation_id=correlation_id,
                        reply_to=queue.name,
                    ),
                    routing_key=routing_key,
                )
                log.info(
                    "rpc_call_published",
                    routing_key=routing_key,
                    correlation_id=correlation_id,
                )
                try:
                    result = await asyncio.wait_for(reply, timeout=deadline)
                except TimeoutError as e:
                    log.warning(
                        "rpc_timeout",
                        routing_key=routing_key,
                        correlation_id=correlation_id,
                        timeout=deadline,
                    )
                    raise RpcTimeout(routing_key, deadline) from e
            except AMQPError as e:
                raise ConsumeFailure(f"Error consuming messages: {e}") from e
            finally:
                if not channel.is_closed:
                    try:
                        await queue.cancel(consumer_tag)
                    except AMQPError as e:
                        log.warning("rpc_consumer_cancel_failed", error=str(e))

        log.info("rpc_reply_received", routing_key=routing_key, correlation_id=correlation_id)
        return result


# --- Module Notes -----------------------------------------------------------
# Reply bodies are returned as decoded JSON without schema checks; nameko services
# conventionally answer `{"result": ..., "error": ...}` and callers interpret that.
