"""FastAPI application factory."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trendmoon_resolver import __version__
from trendmoon_resolver.server.config import ServerConfig
from trendmoon_resolver.server.dependencies import open_resolver
from trendmoon_resolver.server.errors import EXCEPTION_HANDLERS
from trendmoon_resolver.server.rest.middleware import RequestLoggingMiddleware
from trendmoon_resolver.server.rest.routers import entities, health

if TYPE_CHECKING:
    from trendmoon_resolver.core.protocols import LookupService

logger = logging.getLogger(__name__)


def create_app(config: ServerConfig, lookup: LookupService | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``lookup`` overrides the Trendmoon MCP server spawned from
    ``config.lookup``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Startup
        app.state.config = config
        app.state.start_time = time.monotonic()
        async with open_resolver(config, lookup=lookup) as resolver:
            app.state.entity_resolver = resolver
            logger.info("Trendmoon resolver server started (mode=%s)", config.mode)
            yield
            # Shutdown
            app.state.entity_resolver = None
        logger.info("Trendmoon resolver server stopped")

    app = FastAPI(
        title="Trendmoon Resolver",
        description="Canonical names for crypto categories, chains and tokens",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging
    app.add_middleware(RequestLoggingMiddleware)

    # Exception handlers
    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)

    # Routers
    prefix = "/api/v1"
    app.include_router(health.router, prefix=prefix, tags=["health"])
    app.include_router(entities.router, prefix=prefix, tags=["entities"])

    return app
