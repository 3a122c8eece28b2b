"""CLI entrypoint: python -m trendmoon_resolver.server"""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from trendmoon_resolver.clients.config import LookupConfig
from trendmoon_resolver.entities.config import ResolverConfig
from trendmoon_resolver.server.config import ServerConfig


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="trendmoon-resolver",
        description="Trendmoon entity resolver: REST API or MCP tools over stdio",
    )
    p.add_argument("--mode", choices=["rest", "mcp"], default="rest",
                    help="Server mode (default: rest)")
    p.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    p.add_argument("--port", type=int, default=8430, help="Bind port (default: 8430)")

    # Entity cache (unset flags fall back to ENTITY_* environment variables)
    p.add_argument("--cache-dir", type=Path, default=None,
                    help="Directory for timestamped snapshots (default: ./cache)")
    p.add_argument("--fallback-dir", type=Path, default=None,
                    help="Directory holding static categories.json/platforms.json")
    p.add_argument("--cache-minutes", type=float, default=None,
                    help="Memory/disk cache window in minutes (default: 60)")
    p.add_argument("--no-disk-cache", action="store_true",
                    help="Skip reading and writing disk snapshots")
    p.add_argument("--no-token-lookup", action="store_true",
                    help="Resolve tokens from the seed table only")

    # Trendmoon MCP lookup service
    p.add_argument("--lookup-command", default=None,
                    help="Command that starts the Trendmoon MCP server (default: node)")
    p.add_argument("--lookup-arg", action="append", default=None, dest="lookup_args",
                    help="Argument for the lookup command; repeat for several")
    p.add_argument("--no-lookup", action="store_true",
                    help="Do not start the lookup service")

    # Logging
    p.add_argument("--log-level", default="INFO",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> ServerConfig:
    resolver = ResolverConfig.from_env()
    overrides: dict[str, object] = {}
    if args.cache_dir is not None:
        overrides["cache_dir"] = args.cache_dir
    if args.fallback_dir is not None:
        overrides["static_dir"] = args.fallback_dir
    if args.cache_minutes is not None:
        overrides["cache_duration_minutes"] = args.cache_minutes
    if args.no_disk_cache:
        overrides["enable_disk_cache"] = False
    if args.no_token_lookup:
        overrides["enable_dynamic_token_lookup"] = False
    if overrides:
        resolver = replace(resolver, **overrides)

    lookup = LookupConfig()
    if args.lookup_command:
        lookup.command = args.lookup_command
    if args.lookup_args:
        lookup.args = list(args.lookup_args)

    return ServerConfig(
        host=args.host,
        port=args.port,
        mode=args.mode,
        resolver=resolver,
        lookup=lookup,
        use_lookup=not args.no_lookup,
    )


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = build_config(args)

    if config.mode == "mcp":
        _run_mcp(config)
    else:
        _run_rest(config)


def _run_rest(config: ServerConfig) -> None:
    import uvicorn

    from trendmoon_resolver.server.rest.app import create_app

    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port)


def _run_mcp(config: ServerConfig) -> None:
    from trendmoon_resolver.server.mcp.server import create_mcp_server

    server = create_mcp_server(config)
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
