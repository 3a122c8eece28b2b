"""FastMCP server exposing entity resolution as agent tools."""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator

from mcp.server.fastmcp import FastMCP

from trendmoon_resolver.core.exceptions import CacheUnavailableError
from trendmoon_resolver.entities.resolver import BAD_TIMEFRAME_MESSAGE, EntityResolver
from trendmoon_resolver.server.config import ServerConfig
from trendmoon_resolver.server.dependencies import open_resolver
from trendmoon_resolver.temporal.timeframe import parse_timeframe

if TYPE_CHECKING:
    from trendmoon_resolver.core.protocols import LookupService

logger = logging.getLogger(__name__)

# Headline categories/platforms listed before the "and N more" line.
MAIN_CATEGORY_MARKERS = (
    "AI", "DeFi", "Gaming", "Meme", "Layer 1", "Layer 2", "Real World Assets", "SocialFi", "NFT",
)
MAIN_PLATFORM_MARKERS = (
    "ethereum", "arbitrum", "base", "polygon", "solana", "avalanche", "optimistic", "binance",
)
MAX_MAIN_CATEGORIES = 20


async def resolve_entities_text(resolver: EntityResolver, arguments: dict[str, Any]) -> str:
    """Resolved argument bag as JSON, or the rejection message."""
    outcome = await resolver.resolve_arguments(arguments)
    if outcome.rejection is not None:
        return outcome.rejection.message
    return json.dumps(outcome.arguments, indent=2)


async def available_options_text(resolver: EntityResolver, option_type: str = "both") -> str:
    """Human-readable listing of known categories and platforms."""
    state = await resolver.ensure_fresh()
    if not state.is_initialized:
        return "Entity cache is not initialized."

    parts: list[str] = []
    if option_type in ("categories", "both"):
        categories = resolver.available_categories()
        main = [c for c in categories if any(m in c for m in MAIN_CATEGORY_MARKERS)]
        main = main[:MAX_MAIN_CATEGORIES]
        parts.append(f"**Available Categories/Narratives ({len(categories)} total):**\n")
        parts.extend(f"- {c}" for c in main)
        if len(categories) > len(main):
            parts.append(f"\n*And {len(categories) - len(main)} more categories available...*\n")

    if option_type in ("platforms", "both"):
        platforms = resolver.available_platforms()
        main = [p for p in platforms if any(m in p.lower() for m in MAIN_PLATFORM_MARKERS)]
        parts.append(f"**Available Blockchain Platforms ({len(platforms)} total):**\n")
        parts.extend(f"- {p}" for p in main)
        if len(platforms) > len(main):
            parts.append(f"\n*And {len(platforms) - len(main)} more platforms available...*\n")

    info = resolver.cache_info()
    minutes = round((info.cache_age_seconds or 0) / 60)
    parts.append(f"**Cache Info:** Last updated {minutes} minutes ago (source: {info.source})")
    return "\n".join(parts)


def timeframe_text(expr: str) -> str:
    result = parse_timeframe(expr)
    if result is None:
        return BAD_TIMEFRAME_MESSAGE.format(value=expr)
    return json.dumps(result.as_iso())


def create_mcp_server(config: ServerConfig, lookup: LookupService | None = None) -> FastMCP:
    """Create a FastMCP server with the resolver tools.

    The resolver (and the Trendmoon lookup connection behind it) lives for
    the duration of the server's lifespan.
    """
    _resolver: EntityResolver | None = None

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
        nonlocal _resolver
        async with open_resolver(config, lookup=lookup) as resolver:
            _resolver = resolver
            logger.info("Resolver MCP tools ready (source=%s)", resolver.cache.state.source)
            try:
                yield {}
            finally:
                _resolver = None

    mcp = FastMCP(
        "Trendmoon Resolver",
        instructions="Turn loose crypto category, chain, token and timeframe names into canonical values",
        lifespan=lifespan,
    )

    def _get_resolver() -> EntityResolver:
        if _resolver is None:
            raise CacheUnavailableError("resolver not started")
        return _resolver

    @mcp.tool()
    async def resolve_entities(
        category: str | None = None,
        chain: str | None = None,
        token: str | None = None,
        time_period: str | None = None,
    ) -> str:
        """Resolve category/narrative, chain, token and timeframe arguments to canonical values.

        Returns the corrected arguments as JSON, or a message naming the value
        that could not be recognized.
        """
        arguments = {
            "category": category,
            "chain": chain,
            "token": token,
            "time_period": time_period,
        }
        return await resolve_entities_text(
            _get_resolver(), {k: v for k, v in arguments.items() if v is not None}
        )

    @mcp.tool()
    async def get_available_options(option_type: str = "both") -> str:
        """List available categories (narratives) and blockchain platforms.

        option_type: "categories", "platforms" or "both".
        """
        return await available_options_text(_get_resolver(), option_type)

    @mcp.tool(name="parse_timeframe")
    async def parse_timeframe_tool(expr: str) -> str:
        """Convert a timeframe like 7d, 2w, 1m, 24h or "last week" to start/end dates."""
        return timeframe_text(expr)

    return mcp
