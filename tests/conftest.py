"""
tests.conftest

Shared fixtures.

Responsibilities:
- Isolated settings + SQLite database per test.
- A running app (lifespan entered) and an httpx client bound to it.
- An in-memory AMQP broker standing in for RabbitMQ, with scriptable
  "remote services" that answer nameko-style RPC requests.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import json
from collections import defaultdict
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blogdesk.api.app import create_app
from blogdesk.auth.jwt import issue_token, jwt_config
from blogdesk.auth.passwords import hash_password
from blogdesk.db.models import User
from blogdesk.db.repositories.users import UserRepo
from blogdesk.db.seed import bootstrap
from blogdesk.db.session import create_engine, create_sessionmaker
from blogdesk.settings import Settings

# --- Stub broker ------------------------------------------------------------

NO_REPLY = object()

Handler = Callable[[list[Any], dict[str, Any]], Any]


@dataclass
class Delivery:
    body: bytes
    correlation_id: str | None
    reply_to: str | None = None


@dataclass
class PublishedRequest:
    exchange: str
    routing_key: str
    body: dict[str, Any]
    correlation_id: str
    reply_to: str
    content_type: str | None
    content_encoding: str | None


class StubQueue:
    def __init__(self, broker: StubBroker, name: str, auto_delete: bool) -> None:
        self._broker = broker
        self.name = name
        self.auto_delete = auto_delete
        self.consumers: dict[str, Callable[[Delivery], Awaitable[None]]] = {}
        self.delivered: list[Delivery] = []

    async def bind(self, exchange: StubExchange, routing_key: str) -> None:
        self._broker.bindings[exchange.name].append((routing_key, self))

    async def consume(self, callback, no_ack: bool = False) -> str:
        tag = f"ctag-{next(self._broker.ids)}"
        self.consumers[tag] = callback
        return tag

    async def cancel(self, consumer_tag: str) -> None:
        self.consumers.pop(consumer_tag, None)
        if self.auto_delete and not self.consumers:
            self._broker.delete_queue(self)

    def deliver(self, delivery: Delivery) -> None:
        self.delivered.append(delivery)
        for callback in list(self.consumers.values()):
            self._broker.spawn(callback(delivery))


class StubExchange:
    def __init__(self, broker: StubBroker, name: str, type_: Any, durable: bool) -> None:
        self._broker = broker
        self.name = name
        self.type = type_
        self.durable = durable

    async def publish(self, message: Any, routing_key: str, **_: Any) -> None:
        self._broker.route(self, message, routing_key)


class StubChannel:
    def __init__(self, connection: StubConnection) -> None:
        self._connection = connection
        self.is_closed = False

    async def declare_exchange(self, name: str, type_: Any, durable: bool = False, **_: Any):
        return self._connection.broker.declare_exchange(name, type_, durable)

    async def declare_queue(
        self,
        name: str | None = None,
        *,
        exclusive: bool = False,
        auto_delete: bool = False,
        **_: Any,
    ) -> StubQueue:
        if self._connection.broker.fail_declare is not None:
            raise self._connection.broker.fail_declare
        return self._connection.broker.declare_queue(name, auto_delete=auto_delete)

    async def close(self) -> None:
        if not self.is_closed:
            self.is_closed = True
            self._connection.open_channels -= 1


class StubConnection:
    def __init__(self, broker: StubBroker) -> None:
        self.broker = broker
        self.is_closed = False
        self.open_channels = 0
        self.max_open_channels = 0
        self.channels_opened = 0

    async def channel(self) -> StubChannel:
        self.open_channels += 1
        self.channels_opened += 1
        self.max_open_channels = max(self.max_open_channels, self.open_channels)
        return StubChannel(self)

    async def close(self) -> None:
        self.is_closed = True


@dataclass
class StubBroker:
    """Topic exchange semantics with exact-match routing keys."""

    handlers: dict[str, Handler] = field(default_factory=dict)
    exchanges: dict[str, StubExchange] = field(default_factory=dict)
    queues: dict[str, StubQueue] = field(default_factory=dict)
    bindings: dict[str, list[tuple[str, StubQueue]]] = field(
        default_factory=lambda: defaultdict(list)
    )
    requests: list[PublishedRequest] = field(default_factory=list)
    connections: list[StubConnection] = field(default_factory=list)
    fail_connect: BaseException | None = None
    fail_declare: BaseException | None = None
    ids: Any = field(default_factory=itertools.count)
    tasks: set[asyncio.Task[Any]] = field(default_factory=set)

    async def connect(self, url: str) -> StubConnection:
        if self.fail_connect is not None:
            raise self.fail_connect
        conn = StubConnection(self)
        self.connections.append(conn)
        return conn

    def serve(self, routing_key: str, handler: Handler) -> None:
        """Register a remote method: `handler(args, kwargs)` returns the reply body."""
        self.handlers[routing_key] = handler

    def spawn(self, coro: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(coro)
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)

    def declare_exchange(self, name: str, type_: Any, durable: bool) -> StubExchange:
        if name not in self.exchanges:
            self.exchanges[name] = StubExchange(self, name, type_, durable)
        return self.exchanges[name]

    def declare_queue(self, name: str | None, *, auto_delete: bool) -> StubQueue:
        qname = name or f"amq.gen-{next(self.ids)}"
        queue = StubQueue(self, qname, auto_delete)
        self.queues[qname] = queue
        return queue

    def delete_queue(self, queue: StubQueue) -> None:
        self.queues.pop(queue.name, None)
        for bound in self.bindings.values():
            bound[:] = [(k, q) for k, q in bound if q is not queue]

    def route(self, exchange: StubExchange, message: Any, routing_key: str) -> None:
        for key, queue in list(self.bindings[exchange.name]):
            if key == routing_key:
                queue.deliver(
                    Delivery(body=message.body, correlation_id=message.correlation_id)
                )
        handler = self.handlers.get(routing_key)
        if handler is not None:
            request = PublishedRequest(
                exchange=exchange.name,
                routing_key=routing_key,
                body=json.loads(message.body),
                correlation_id=message.correlation_id,
                reply_to=message.reply_to,
                content_type=message.content_type,
                content_encoding=message.content_encoding,
            )
            self.requests.append(request)
            self.spawn(self._answer(exchange, handler, request))

    async def _answer(self, exchange: StubExchange, handler: Handler, req: PublishedRequest):
        reply = handler(req.body["args"], req.body["kwargs"])
        if inspect.isawaitable(reply):
            reply = await reply
        if reply is NO_REPLY:
            return
        body = reply if isinstance(reply, bytes) else json.dumps(reply).encode("utf-8")
        self.route(exchange, Delivery(body=body, correlation_id=req.correlation_id), req.reply_to)

    def reply(self, exchange: str, routing_key: str, correlation_id: str, body: Any) -> None:
        """Publish an arbitrary reply, e.g. a stray or duplicate one."""
        payload = json.dumps(body).encode("utf-8")
        self.route(
            self.exchanges[exchange],
            Delivery(body=payload, correlation_id=correlation_id),
            routing_key,
        )


@pytest.fixture
def broker() -> StubBroker:
    return StubBroker()


# --- App + DB ---------------------------------------------------------------


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        log_level="WARNING",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        rpc_timeout_seconds=2.0,
        rpc_max_channels=4,
    )


@pytest_asyncio.fixture
async def sessionmaker(settings: Settings) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_engine(settings)
    await bootstrap(engine)
    try:
        yield create_sessionmaker(engine)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def app(settings: Settings, broker: StubBroker):
    app = create_app(settings=settings, broker_connect=broker.connect)
    # httpx ASGITransport does not run the lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def app_sessions(app) -> async_sessionmaker[AsyncSession]:
    return app.state.sessionmaker


async def make_user(
    sessions: async_sessionmaker[AsyncSession],
    *,
    email: str,
    role: int | None,
    name: str = "Someone",
    password: str = "secret123",
) -> User:
    async with sessions() as session:
        users = UserRepo(session)
        user = await users.create(
            name=name, email=email, hashed_password=hash_password(password, rounds=4)
        )
        if role is not None:
            await users.assign_role(user.id, role)
        await session.commit()
        return user


def bearer(settings: Settings, user: User) -> dict[str, str]:
    token = issue_token(cfg=jwt_config(settings), user_id=user.id, email=user.email)
    return {"Authorization": f"Bearer {token}"}


# --- Module Notes -----------------------------------------------------------
# The stub broker only models what `blogdesk.rpc` touches: exchanges, server-named
# queues, bindings, consumers, and publish. Routing is exact-match on the key.
