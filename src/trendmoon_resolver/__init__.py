"""Trendmoon Resolver - canonical names for loosely phrased crypto entities.

Turns what an agent or user typed ("defi", "arb", "sol", "last week") into
the exact category names, platform slugs, token ids and date ranges the
Trendmoon API accepts:

- Alias index over categories, platforms and tokens
- Memory / disk snapshot / remote / static refresh chain
- Shorthand timeframe parsing
- REST (FastAPI) and MCP (FastMCP) server surfaces

Example:
    >>> from trendmoon_resolver import EntityResolver, ResolverConfig
    >>>
    >>> resolver = EntityResolver.from_config(ResolverConfig(enable_disk_cache=False))
    >>> await resolver.ensure_fresh()
    >>> resolver.resolve_category("defi")
    'Decentralized Finance (DeFi)'
    >>> outcome = await resolver.resolve_arguments({"chain": "sol", "time_period": "7d"})
    >>> outcome.arguments["chain"]
    'solana'
"""

__version__ = "0.1.0"

from trendmoon_resolver.core.exceptions import (
    CacheCorruptError,
    CacheUnavailableError,
    ConfigurationError,
    ResolverError,
    SourceUnavailableError,
)
from trendmoon_resolver.entities import (
    AliasIndex,
    AliasTables,
    CacheInfo,
    CanonicalEntity,
    EntityCache,
    EntityKind,
    EntityResolver,
    Rejection,
    ResolutionOutcome,
    ResolverConfig,
    TokenMatch,
)
from trendmoon_resolver.temporal import (
    Clock,
    FakeClock,
    SystemClock,
    TimeframeResult,
    parse_timeframe,
)

__all__ = [
    "__version__",
    # Entities
    "AliasIndex",
    "AliasTables",
    "CacheInfo",
    "CanonicalEntity",
    "EntityCache",
    "EntityKind",
    "EntityResolver",
    "Rejection",
    "ResolutionOutcome",
    "ResolverConfig",
    "TokenMatch",
    # Temporal
    "Clock",
    "FakeClock",
    "SystemClock",
    "TimeframeResult",
    "parse_timeframe",
    # Errors
    "CacheCorruptError",
    "CacheUnavailableError",
    "ConfigurationError",
    "ResolverError",
    "SourceUnavailableError",
]
