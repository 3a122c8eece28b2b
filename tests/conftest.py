"""Pytest fixtures for trendmoon-resolver tests.

Provides fixtures for:
- Fake clock for staleness checks
- Alias tables and a populated AliasIndex
- A fake LookupService (AsyncMock) standing in for the Trendmoon MCP server
- Cache directories and resolver configs rooted in tmp_path
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from trendmoon_resolver.entities.aliases import AliasTables
from trendmoon_resolver.entities.config import ResolverConfig
from trendmoon_resolver.entities.index import AliasIndex
from trendmoon_resolver.entities.snapshot import SnapshotStore
from trendmoon_resolver.entities.types import EntityKind
from trendmoon_resolver.temporal.clock import FakeClock


# ============================================================================
# Sample data
# ============================================================================

# What the fake lookup service reports. Deliberately smaller than the
# bundled static lists so tests can tell the sources apart by count.
REMOTE_CATEGORIES = [
    "Decentralized Finance (DeFi)",
    "Meme",
    "Layer 2 (L2)",
]

REMOTE_PLATFORMS = [
    "ethereum",
    "arbitrum-one",
    "solana",
    "polygon-pos",
]


# ============================================================================
# Core fixtures
# ============================================================================


@pytest.fixture
def fake_clock() -> FakeClock:
    """Create a fake clock for testing."""
    return FakeClock(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def alias_tables() -> AliasTables:
    """The bundled alias tables."""
    return AliasTables.load()


@pytest.fixture
def static_index(alias_tables: AliasTables) -> AliasIndex:
    """AliasIndex populated from the bundled static lists."""
    categories, platforms = SnapshotStore.load_static(ResolverConfig().static_dir)
    index = AliasIndex(alias_tables)
    index.rebuild(EntityKind.CATEGORY, categories)
    index.rebuild(EntityKind.PLATFORM, platforms)
    return index


@pytest.fixture
def fake_lookup() -> AsyncMock:
    """LookupService double returning REMOTE_CATEGORIES/REMOTE_PLATFORMS."""
    lookup = AsyncMock()
    lookup.list_categories.return_value = list(REMOTE_CATEGORIES)
    lookup.list_platforms.return_value = list(REMOTE_PLATFORMS)
    lookup.search_tokens.return_value = []
    return lookup


# ============================================================================
# Config fixtures
# ============================================================================


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Snapshot directory for a single test."""
    return tmp_path / "cache"


@pytest.fixture
def resolver_config(cache_dir: Path) -> ResolverConfig:
    """Resolver config writing snapshots under tmp_path."""
    return ResolverConfig(cache_dir=cache_dir)
