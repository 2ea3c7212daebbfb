"""
blogdesk.api.app

FastAPI app factory for the blogging platform.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Own shared infrastructure for the process lifetime (DB engine, broker pool).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blogdesk import __version__
from blogdesk.api.errors import register_exception_handlers
from blogdesk.api.routers.auth import router as auth_router
from blogdesk.api.routers.authors import router as authors_router
from blogdesk.api.routers.blog import router as blog_router
from blogdesk.api.routers.generate import router as generate_router
from blogdesk.api.routers.health import router as health_router
from blogdesk.api.routers.newsletters import router as newsletters_router
from blogdesk.api.routers.roles import router as roles_router
from blogdesk.api.routers.stats import router as stats_router
from blogdesk.api.routers.users import router as users_router
from blogdesk.db.seed import bootstrap
from blogdesk.db.session import create_engine, create_sessionmaker
from blogdesk.observability.logging import configure_logging, get_logger
from blogdesk.observability.middleware import RequestContextMiddleware
from blogdesk.rpc.pool import BrokerPool, ConnectFactory
from blogdesk.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, broker_connect: ConnectFactory | None = None) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables and seed roles.
            await bootstrap(engine)
        # Connects lazily on the first RPC call.
        app.state.broker = BrokerPool(
            url=settings.amqp_url,
            max_channels=settings.rpc_max_channels,
            connect=broker_connect,
        )
        try:
            yield
        finally:
            await app.state.broker.close()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Blogdesk API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(roles_router)
    # Authors first: `/api/blog/author` must not fall into `/api/blog/{post_id}`.
    app.include_router(authors_router)
    app.include_router(blog_router)
    app.include_router(newsletters_router)
    app.include_router(stats_router)
    app.include_router(generate_router)

    return app


# --- Module Notes -----------------------------------------------------------
# This file is intentionally small: app composition stays here; request handling
# stays in routers, broker mechanics in `blogdesk.rpc`.
