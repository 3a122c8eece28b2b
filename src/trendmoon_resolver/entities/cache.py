"""EntityCache: keeps the AliasIndex populated from the cheapest fresh source.

Every refresh walks the same preference chain and stops at the first tier
that succeeds:

  memory  → index already built within the cache window (no I/O)
  disk    → newest snapshot younger than the cache window
  remote  → lookup service; result is written as a new snapshot
  static  → bundled fallback lists
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from trendmoon_resolver.core.exceptions import CacheCorruptError, SourceUnavailableError
from trendmoon_resolver.entities.config import ResolverConfig
from trendmoon_resolver.entities.index import AliasIndex
from trendmoon_resolver.entities.snapshot import SnapshotStore
from trendmoon_resolver.entities.types import CacheState, EntityKind
from trendmoon_resolver.temporal.clock import Clock, SystemClock

if TYPE_CHECKING:
    from trendmoon_resolver.core.protocols import LookupService

logger = logging.getLogger(__name__)

SOURCE_DISK = "disk"
SOURCE_REMOTE = "remote"
SOURCE_STATIC = "static"


class EntityCache:
    """Refresh lifecycle for the category and platform tables.

    Concurrent ``ensure_fresh`` callers share one in-flight refresh instead
    of each hitting the lookup service.
    """

    def __init__(
        self,
        index: AliasIndex,
        config: ResolverConfig | None = None,
        snapshots: SnapshotStore | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.index = index
        self.config = config or ResolverConfig()
        self.snapshots = snapshots or SnapshotStore(self.config.cache_dir)
        self.clock = clock or SystemClock()
        self.state = CacheState()
        self._refresh_task: asyncio.Task[CacheState] | None = None

    @property
    def is_initialized(self) -> bool:
        return self.state.is_initialized

    def is_memory_fresh(self) -> bool:
        """True when the index was populated within the cache window."""
        if not self.state.is_initialized or self.state.last_refresh is None:
            return False
        age = self.clock.seconds_since(self.state.last_refresh)
        return age < self.config.cache_duration.total_seconds()

    def invalidate(self) -> None:
        """Drop memory freshness; the next ``ensure_fresh`` re-runs the chain."""
        self.state.last_refresh = None

    async def ensure_fresh(self, lookup: LookupService | None = None) -> CacheState:
        """Make sure the index reflects a fresh view of categories and platforms.

        Never raises for source failures. Check ``state.is_initialized``
        afterwards; ``state.last_error`` says why it stayed uninitialized.
        """
        if self.is_memory_fresh():
            logger.debug("In-memory entity cache is fresh")
            return self.state

        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.create_task(self._refresh(lookup))
        return await asyncio.shield(self._refresh_task)

    async def _refresh(self, lookup: LookupService | None) -> CacheState:
        logger.info("Entity cache is stale or not initialized")

        if self.config.enable_disk_cache and self._load_fresh_snapshot():
            return self.state

        if lookup is not None:
            try:
                await self._fetch_remote(lookup)
                return self.state
            except (SourceUnavailableError, OSError, asyncio.TimeoutError) as e:
                logger.warning("Lookup service fetch failed, falling back to static files: %s", e)
        else:
            logger.info("No lookup service configured, using static files")

        self._load_static()
        return self.state

    def _load_fresh_snapshot(self) -> bool:
        snapshot = self.snapshots.latest()
        if snapshot is None:
            return False
        age = self.clock.timestamp() - snapshot.timestamp
        if age >= self.config.cache_duration.total_seconds():
            logger.debug("Newest snapshot is %.0fs old, ignoring it", age)
            return False
        try:
            categories, platforms = self.snapshots.load(snapshot)
        except CacheCorruptError as e:
            logger.warning("Failed to load disk snapshot, will try to refresh: %s", e)
            return False
        self._populate(categories, platforms, SOURCE_DISK)
        logger.info("Loaded entity cache from disk snapshot %d", snapshot.timestamp)
        return True

    async def _fetch_remote(self, lookup: LookupService) -> None:
        logger.info("Fetching categories and platforms from lookup service")
        categories, platforms = await asyncio.gather(
            lookup.list_categories(),
            lookup.list_platforms(),
        )
        for label, names in (("categories", categories), ("platforms", platforms)):
            if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
                raise SourceUnavailableError(
                    "lookup", f"Malformed {label} list from lookup service"
                )

        self._populate(categories, platforms, SOURCE_REMOTE)
        if self.config.enable_disk_cache:
            try:
                self.snapshots.write(categories, platforms, int(self.clock.timestamp()))
            except OSError as e:
                logger.warning("Failed to write cache snapshot: %s", e)
        logger.info("Refreshed entity cache from lookup service")

    def _load_static(self) -> None:
        try:
            categories, platforms = self.snapshots.load_static(self.config.static_dir)
        except CacheCorruptError as e:
            self.state.last_error = str(e)
            logger.error(
                "Failed to load entity lists from lookup service and static fallback: %s", e
            )
            return
        self._populate(categories, platforms, SOURCE_STATIC)
        logger.info("Loaded entity cache from static fallback files in %s", self.config.static_dir)

    def _populate(self, categories: list[str], platforms: list[str], source: str) -> None:
        self.index.rebuild(EntityKind.CATEGORY, categories)
        self.index.rebuild(EntityKind.PLATFORM, platforms)
        self.state.is_initialized = True
        self.state.last_refresh = self.clock.now()
        self.state.source = source
        self.state.last_error = None
        logger.info(
            "Entity cache populated from %s with %d categories and %d platforms",
            source,
            len(categories),
            len(platforms),
        )
