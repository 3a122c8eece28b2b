"""Tests for the EntityCache refresh chain.

memory → disk snapshot → lookup service → static fallback, driven by a
FakeClock so staleness is deterministic.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import replace
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import anyio
import pytest

from trendmoon_resolver.clients.trendmoon import McpLookupService
from trendmoon_resolver.core.exceptions import SourceUnavailableError
from trendmoon_resolver.entities.aliases import AliasTables
from trendmoon_resolver.entities.cache import (
    SOURCE_DISK,
    SOURCE_REMOTE,
    SOURCE_STATIC,
    EntityCache,
)
from trendmoon_resolver.entities.config import ResolverConfig
from trendmoon_resolver.entities.index import AliasIndex
from trendmoon_resolver.entities.types import EntityKind
from trendmoon_resolver.temporal.clock import FakeClock


@pytest.fixture
def cache(alias_tables: AliasTables, resolver_config: ResolverConfig, fake_clock: FakeClock):
    return EntityCache(AliasIndex(alias_tables), config=resolver_config, clock=fake_clock)


def _snapshot_files(cache_dir: Path) -> list[str]:
    if not cache_dir.is_dir():
        return []
    return sorted(p.name for p in cache_dir.iterdir())


class TestRemoteRefresh:
    """First refresh goes to the lookup service and writes a snapshot."""

    @pytest.mark.asyncio
    async def test_populates_from_lookup(self, cache: EntityCache, fake_lookup: AsyncMock):
        state = await cache.ensure_fresh(fake_lookup)

        assert state.is_initialized
        assert state.source == SOURCE_REMOTE
        assert state.last_error is None
        assert cache.index.size(EntityKind.CATEGORY) == 3
        assert cache.index.resolve_platform("arbitrum") == "arbitrum-one"

    @pytest.mark.asyncio
    async def test_writes_snapshot(
        self, cache: EntityCache, fake_lookup: AsyncMock, cache_dir: Path, fake_clock: FakeClock
    ):
        await cache.ensure_fresh(fake_lookup)

        ts = int(fake_clock.timestamp())
        assert _snapshot_files(cache_dir) == [f"categories_{ts}.json", f"platforms_{ts}.json"]
        written = json.loads((cache_dir / f"platforms_{ts}.json").read_text())
        assert written == fake_lookup.list_platforms.return_value

    @pytest.mark.asyncio
    async def test_disk_cache_disabled(
        self,
        alias_tables: AliasTables,
        resolver_config: ResolverConfig,
        fake_clock: FakeClock,
        fake_lookup: AsyncMock,
        cache_dir: Path,
    ):
        config = replace(resolver_config, enable_disk_cache=False)
        cache = EntityCache(AliasIndex(alias_tables), config=config, clock=fake_clock)

        state = await cache.ensure_fresh(fake_lookup)

        assert state.source == SOURCE_REMOTE
        assert _snapshot_files(cache_dir) == []

    @pytest.mark.asyncio
    async def test_malformed_list_falls_back(self, cache: EntityCache, fake_lookup: AsyncMock):
        fake_lookup.list_platforms.return_value = ["ethereum", 42]

        state = await cache.ensure_fresh(fake_lookup)

        assert state.source == SOURCE_STATIC
        assert cache.index.size(EntityKind.PLATFORM) == 23


class TestMemoryTier:
    """Memory-fresh calls never touch disk or the lookup service."""

    @pytest.mark.asyncio
    async def test_fresh_memory_skips_io(
        self, cache: EntityCache, fake_lookup: AsyncMock, fake_clock: FakeClock
    ):
        await cache.ensure_fresh(fake_lookup)
        fake_clock.advance(minutes=59)

        await cache.ensure_fresh(fake_lookup)

        assert fake_lookup.list_categories.await_count == 1
        assert cache.is_memory_fresh()

    @pytest.mark.asyncio
    async def test_stale_memory_and_disk_refetches(
        self, cache: EntityCache, fake_lookup: AsyncMock, fake_clock: FakeClock, cache_dir: Path
    ):
        await cache.ensure_fresh(fake_lookup)
        fake_clock.advance(minutes=61)

        state = await cache.ensure_fresh(fake_lookup)

        assert fake_lookup.list_categories.await_count == 2
        assert state.source == SOURCE_REMOTE
        assert len(_snapshot_files(cache_dir)) == 2

    @pytest.mark.asyncio
    async def test_invalidate(self, cache: EntityCache, fake_lookup: AsyncMock):
        await cache.ensure_fresh(fake_lookup)
        cache.invalidate()
        assert not cache.is_memory_fresh()
        assert cache.is_initialized


class TestDiskTier:
    """Snapshot reads within the cache window."""

    @pytest.mark.asyncio
    async def test_fresh_snapshot_used(
        self,
        alias_tables: AliasTables,
        resolver_config: ResolverConfig,
        fake_clock: FakeClock,
        fake_lookup: AsyncMock,
        cache_dir: Path,
    ):
        first = EntityCache(AliasIndex(alias_tables), config=resolver_config, clock=fake_clock)
        await first.ensure_fresh(fake_lookup)

        # A new process 30 minutes later
        fake_clock.advance(minutes=30)
        second = EntityCache(AliasIndex(alias_tables), config=resolver_config, clock=fake_clock)
        state = await second.ensure_fresh(fake_lookup)

        assert state.source == SOURCE_DISK
        assert fake_lookup.list_categories.await_count == 1
        assert second.index.resolve_category("defi") == "Decentralized Finance (DeFi)"

    @pytest.mark.asyncio
    async def test_snapshot_marks_memory_fresh(
        self, cache: EntityCache, fake_clock: FakeClock, cache_dir: Path
    ):
        ts = int(fake_clock.timestamp()) - 50 * 60
        cache_dir.mkdir(parents=True)
        (cache_dir / f"categories_{ts}.json").write_text('["Meme"]')
        (cache_dir / f"platforms_{ts}.json").write_text('["base"]')

        state = await cache.ensure_fresh()

        assert state.source == SOURCE_DISK
        assert state.last_refresh == fake_clock.now()

    @pytest.mark.asyncio
    async def test_old_snapshot_ignored(
        self, cache: EntityCache, fake_clock: FakeClock, fake_lookup: AsyncMock, cache_dir: Path
    ):
        ts = int(fake_clock.timestamp()) - 61 * 60
        cache_dir.mkdir(parents=True)
        (cache_dir / f"categories_{ts}.json").write_text('["Meme"]')
        (cache_dir / f"platforms_{ts}.json").write_text('["base"]')

        state = await cache.ensure_fresh(fake_lookup)

        assert state.source == SOURCE_REMOTE
        now_ts = int(fake_clock.timestamp())
        assert _snapshot_files(cache_dir) == [
            f"categories_{now_ts}.json",
            f"platforms_{now_ts}.json",
        ]

    @pytest.mark.asyncio
    async def test_corrupt_snapshot_triggers_fetch(
        self, cache: EntityCache, fake_clock: FakeClock, fake_lookup: AsyncMock, cache_dir: Path
    ):
        ts = int(fake_clock.timestamp()) - 60
        cache_dir.mkdir(parents=True)
        (cache_dir / f"categories_{ts}.json").write_text("{truncated")
        (cache_dir / f"platforms_{ts}.json").write_text('["base"]')

        state = await cache.ensure_fresh(fake_lookup)

        assert state.source == SOURCE_REMOTE
        assert fake_lookup.list_categories.await_count == 1
        assert f"categories_{ts}.json" not in _snapshot_files(cache_dir)


class TestStaticTier:
    """Bundled fallback lists."""

    @pytest.mark.asyncio
    async def test_lookup_failure_uses_static(self, cache: EntityCache, fake_lookup: AsyncMock):
        fake_lookup.list_categories.side_effect = SourceUnavailableError("getAllCategories")

        state = await cache.ensure_fresh(fake_lookup)

        assert state.is_initialized
        assert state.source == SOURCE_STATIC
        assert cache.index.size(EntityKind.CATEGORY) == 25

    @pytest.mark.asyncio
    async def test_timeout_uses_static(self, cache: EntityCache, fake_lookup: AsyncMock):
        fake_lookup.list_platforms.side_effect = asyncio.TimeoutError()
        state = await cache.ensure_fresh(fake_lookup)
        assert state.source == SOURCE_STATIC

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            anyio.ClosedResourceError(),
            anyio.BrokenResourceError(),
            RuntimeError("Invalid structured content returned by tool getPlatforms"),
        ],
    )
    async def test_dead_mcp_session_uses_static(self, cache: EntityCache, error: Exception):
        session = MagicMock()
        session.call_tool = AsyncMock(side_effect=error)

        state = await cache.ensure_fresh(McpLookupService(session))

        assert state.is_initialized
        assert state.source == SOURCE_STATIC
        assert cache.index.size(EntityKind.PLATFORM) == 23

    @pytest.mark.asyncio
    async def test_dead_mcp_session_token_search(self, cache: EntityCache):
        session = MagicMock()
        session.call_tool = AsyncMock(side_effect=anyio.ClosedResourceError())
        await cache.ensure_fresh()

        assert await cache.index.resolve_token("pepe", McpLookupService(session)) is None

    @pytest.mark.asyncio
    async def test_no_lookup_uses_static(self, cache: EntityCache, cache_dir: Path):
        state = await cache.ensure_fresh()
        assert state.source == SOURCE_STATIC
        assert _snapshot_files(cache_dir) == []

    @pytest.mark.asyncio
    async def test_everything_fails(
        self,
        alias_tables: AliasTables,
        resolver_config: ResolverConfig,
        fake_clock: FakeClock,
        fake_lookup: AsyncMock,
        tmp_path: Path,
    ):
        config = replace(resolver_config, static_dir=tmp_path / "missing")
        fake_lookup.list_categories.side_effect = SourceUnavailableError("getAllCategories")
        cache = EntityCache(AliasIndex(alias_tables), config=config, clock=fake_clock)

        state = await cache.ensure_fresh(fake_lookup)

        assert not state.is_initialized
        assert state.last_refresh is None
        assert "missing" in state.last_error

    @pytest.mark.asyncio
    async def test_failure_after_success_keeps_tables(
        self,
        alias_tables: AliasTables,
        resolver_config: ResolverConfig,
        fake_clock: FakeClock,
        fake_lookup: AsyncMock,
        tmp_path: Path,
    ):
        config = replace(resolver_config, static_dir=tmp_path / "missing")
        cache = EntityCache(AliasIndex(alias_tables), config=config, clock=fake_clock)
        await cache.ensure_fresh(fake_lookup)

        fake_clock.advance(hours=2)
        fake_lookup.list_categories.side_effect = SourceUnavailableError("getAllCategories")
        state = await cache.ensure_fresh(fake_lookup)

        assert state.is_initialized
        assert state.last_error is not None
        assert cache.index.resolve_category("meme") == "Meme"
        assert not cache.is_memory_fresh()


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_fetch(
        self, cache: EntityCache, fake_lookup: AsyncMock
    ):
        calls = 0

        async def slow_categories():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return ["Meme"]

        fake_lookup.list_categories.side_effect = slow_categories

        states = await asyncio.gather(*(cache.ensure_fresh(fake_lookup) for _ in range(5)))

        assert calls == 1
        assert all(s.is_initialized for s in states)
