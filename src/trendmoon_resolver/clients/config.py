"""Configuration for the Trendmoon MCP lookup service."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

DEFAULT_PASSTHROUGH = (
    "TRENDMOON_API_KEY",
    "TRENDMOON_API_URL",
    "TRENDMOON_SERVER_NAME",
    "DEBUG_MODE",
    "NODE_ENV",
    "PATH",
)


@dataclass
class LookupConfig:
    """How to spawn and talk to the Trendmoon MCP server.

    Defaults launch the Node build of the server over stdio, the same way
    the agent does.
    """

    command: str = "node"
    args: list[str] = field(default_factory=lambda: ["dist/index.js"])
    env_passthrough: tuple[str, ...] = DEFAULT_PASSTHROUGH
    timeout: float = 30.0

    def server_env(self, environ: Mapping[str, str] | None = None) -> dict[str, str]:
        """Environment handed to the server subprocess."""
        env = os.environ if environ is None else environ
        return {key: env[key] for key in self.env_passthrough if key in env}

    def has_api_key(self, environ: Mapping[str, str] | None = None) -> bool:
        env = os.environ if environ is None else environ
        return bool(env.get("TRENDMOON_API_KEY"))
