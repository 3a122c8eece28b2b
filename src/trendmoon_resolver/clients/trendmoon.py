"""LookupService backed by the Trendmoon MCP server.

Tools used:
  getAllCategories  → JSON array of category names
  getPlatforms      → JSON array of platform slugs (or structured
                      content ``{"platforms": [...]}``)
  searchCoins       → JSON array of coins ({id, name, symbol, ...})
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any

import anyio
from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client
from mcp.shared.exceptions import McpError

from trendmoon_resolver.clients.config import LookupConfig
from trendmoon_resolver.core.exceptions import SourceUnavailableError
from trendmoon_resolver.entities.types import TokenMatch

logger = logging.getLogger(__name__)

TOOL_CATEGORIES = "getAllCategories"
TOOL_PLATFORMS = "getPlatforms"
TOOL_SEARCH = "searchCoins"

# Raised by the session when the server process is gone or a result fails
# output-schema validation.
_TRANSPORT_ERRORS = (
    McpError,
    OSError,
    TimeoutError,
    anyio.ClosedResourceError,
    anyio.BrokenResourceError,
    anyio.EndOfStream,
    RuntimeError,
)

# Keys a search payload may wrap its rows in.
_ROW_KEYS = ("data", "coins", "results", "items")


class McpLookupService:
    """Implements ``LookupService`` over an initialized MCP ``ClientSession``."""

    def __init__(self, session: ClientSession, timeout: float | None = 30.0) -> None:
        self._session = session
        self._timeout = timedelta(seconds=timeout) if timeout else None

    async def list_categories(self) -> list[str]:
        result = await self._call(TOOL_CATEGORIES, {})
        return _names(TOOL_CATEGORIES, _json_payload(TOOL_CATEGORIES, result))

    async def list_platforms(self) -> list[str]:
        result = await self._call(TOOL_PLATFORMS, {})
        structured = getattr(result, "structuredContent", None)
        if isinstance(structured, dict) and structured.get("platforms") is not None:
            return _names(TOOL_PLATFORMS, structured["platforms"])
        return _names(TOOL_PLATFORMS, _json_payload(TOOL_PLATFORMS, result))

    async def search_tokens(
        self,
        query: str,
        limit: int = 1,
        order_by: str = "market_cap",
    ) -> list[TokenMatch]:
        result = await self._call(
            TOOL_SEARCH,
            {
                "query": query,
                "orderBy": order_by,
                "orderDirection": "desc",
                "limit": limit,
            },
        )
        payload = _json_payload(TOOL_SEARCH, result)
        if isinstance(payload, dict):
            payload = next((payload[k] for k in _ROW_KEYS if isinstance(payload.get(k), list)), [])
        if not isinstance(payload, list):
            raise SourceUnavailableError(
                TOOL_SEARCH, f"{TOOL_SEARCH} returned {type(payload).__name__}"
            )

        matches: list[TokenMatch] = []
        for row in payload:
            if not isinstance(row, dict) or not row.get("name"):
                continue
            matches.append(
                TokenMatch(
                    id=str(row.get("id") or row.get("coin_id") or row["name"]).lower(),
                    name=str(row["name"]),
                    symbol=str(row.get("symbol") or ""),
                )
            )
        return matches[:limit]

    async def _call(self, tool: str, arguments: dict[str, Any]) -> Any:
        logger.debug("Calling MCP tool %s with %s", tool, arguments)
        try:
            result = await self._session.call_tool(
                tool, arguments, read_timeout_seconds=self._timeout
            )
        except _TRANSPORT_ERRORS as e:
            raise SourceUnavailableError(tool, f"MCP tool {tool} failed: {e}") from e
        if getattr(result, "isError", False):
            raise SourceUnavailableError(
                tool, f"MCP tool {tool} returned an error: {_first_text(result)}"
            )
        return result


def _first_text(result: Any) -> str | None:
    for item in getattr(result, "content", None) or []:
        if getattr(item, "type", None) == "text":
            return item.text
    return None


def _json_payload(tool: str, result: Any) -> Any:
    text = _first_text(result)
    if text is None:
        raise SourceUnavailableError(tool, f"{tool} returned no text content")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SourceUnavailableError(tool, f"{tool} returned invalid JSON: {e}") from e


def _names(tool: str, payload: Any) -> list[str]:
    """Accept an array of strings or of objects carrying a ``name``."""
    if not isinstance(payload, list):
        raise SourceUnavailableError(
            tool, f"{tool} returned {type(payload).__name__}, expected a list"
        )
    names: list[str] = []
    for item in payload:
        if isinstance(item, str):
            names.append(item)
        elif isinstance(item, dict) and isinstance(item.get("name"), str):
            names.append(item["name"])
        else:
            raise SourceUnavailableError(tool, f"{tool} returned an unexpected item: {item!r}")
    return names


@asynccontextmanager
async def connect_stdio(config: LookupConfig | None = None) -> AsyncIterator[McpLookupService]:
    """Spawn the Trendmoon MCP server and yield a connected lookup service."""
    config = config or LookupConfig()
    params = StdioServerParameters(
        command=config.command,
        args=list(config.args),
        env=config.server_env(),
    )
    async with stdio_client(params) as (read, write):
        async with ClientSession(read, write) as session:
            await session.initialize()
            logger.info(
                "Connected to Trendmoon MCP server (%s %s)", config.command, " ".join(config.args)
            )
            yield McpLookupService(session, timeout=config.timeout)
