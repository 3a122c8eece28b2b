"""Lookup service clients.

Example:
    >>> from trendmoon_resolver.clients import LookupConfig, connect_stdio
    >>> from trendmoon_resolver.entities import EntityResolver, ResolverConfig
    >>>
    >>> async with connect_stdio(LookupConfig(args=["dist/index.js"])) as lookup:
    ...     resolver = EntityResolver.from_config(ResolverConfig(), lookup=lookup)
    ...     await resolver.ensure_fresh()
    ...     resolver.resolve_platform("arbitrum")
    'arbitrum-one'
"""

from trendmoon_resolver.clients.config import LookupConfig
from trendmoon_resolver.clients.trendmoon import McpLookupService, connect_stdio

__all__ = [
    "LookupConfig",
    "McpLookupService",
    "connect_stdio",
]
