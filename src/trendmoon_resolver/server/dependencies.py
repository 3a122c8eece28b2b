"""Dependency injection: resolver lifecycle and request-scoped accessors."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from fastapi import Depends, Request

from trendmoon_resolver.clients.config import LookupConfig
from trendmoon_resolver.clients.trendmoon import connect_stdio
from trendmoon_resolver.core.exceptions import CacheUnavailableError
from trendmoon_resolver.entities.resolver import EntityResolver
from trendmoon_resolver.server.config import ServerConfig

if TYPE_CHECKING:
    from trendmoon_resolver.core.protocols import LookupService

logger = logging.getLogger(__name__)


async def _connect_lookup(stack: AsyncExitStack, config: LookupConfig) -> LookupService | None:
    """Spawn the Trendmoon MCP server, or return None when it cannot start."""
    if not config.has_api_key():
        logger.warning("TRENDMOON_API_KEY is not set, running without the lookup service")
        return None
    try:
        return await stack.enter_async_context(connect_stdio(config))
    except Exception:
        logger.warning(
            "Could not start the Trendmoon MCP server, using cached/static entity lists",
            exc_info=True,
        )
        return None


@asynccontextmanager
async def open_resolver(
    config: ServerConfig,
    lookup: LookupService | None = None,
) -> AsyncIterator[EntityResolver]:
    """Build a resolver, warm its cache, and keep the lookup service open.

    A caller-supplied ``lookup`` is used as-is and never closed here.
    """
    async with AsyncExitStack() as stack:
        if lookup is None and config.use_lookup:
            lookup = await _connect_lookup(stack, config.lookup)

        resolver = EntityResolver.from_config(config.resolver, lookup=lookup)
        state = await resolver.ensure_fresh()
        if state.is_initialized:
            logger.info("Entity resolver ready (source=%s)", state.source)
        else:
            logger.error("Entity resolver started uninitialized: %s", state.last_error)
        yield resolver


def get_resolver(request: Request) -> EntityResolver:
    """Get the EntityResolver from app state."""
    resolver: EntityResolver | None = getattr(request.app.state, "entity_resolver", None)
    if resolver is None:
        raise CacheUnavailableError("resolver not started")
    return resolver


async def get_fresh_resolver(
    resolver: EntityResolver = Depends(get_resolver),
) -> EntityResolver:
    """Resolver whose cache has been refreshed for this request."""
    state = await resolver.ensure_fresh()
    if not state.is_initialized:
        raise CacheUnavailableError(state.last_error)
    return resolver
