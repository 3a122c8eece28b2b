"""Server configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

from trendmoon_resolver.clients.config import LookupConfig
from trendmoon_resolver.entities.config import ResolverConfig


@dataclass
class ServerConfig:
    """Configuration for the resolver server."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8430

    # Mode: "rest" (FastAPI) or "mcp" (FastMCP over stdio)
    mode: str = "rest"

    # Resolver cache
    resolver: ResolverConfig = field(default_factory=ResolverConfig.from_env)

    # Trendmoon MCP lookup service; disabled means static/disk data only
    lookup: LookupConfig = field(default_factory=LookupConfig)
    use_lookup: bool = True

    # CORS
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
