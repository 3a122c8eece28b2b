"""EntityResolver: ties index, cache and lookup service together for callers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from trendmoon_resolver.entities.aliases import AliasTables
from trendmoon_resolver.entities.cache import EntityCache
from trendmoon_resolver.entities.config import ResolverConfig
from trendmoon_resolver.entities.index import AliasIndex
from trendmoon_resolver.entities.snapshot import SnapshotStore
from trendmoon_resolver.entities.types import (
    CacheInfo,
    CacheState,
    EntityKind,
    Rejection,
    ResolutionOutcome,
)
from trendmoon_resolver.temporal.timeframe import TimeframeResult, parse_timeframe

if TYPE_CHECKING:
    from trendmoon_resolver.core.protocols import LookupService
    from trendmoon_resolver.temporal.clock import Clock

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = ("category", "narrative", "category_name")
PLATFORM_FIELDS = ("chain", "platform")
TOKEN_FIELDS = ("token", "token_name")
TIMEFRAME_FIELDS = ("time_period", "timeframe")

UNKNOWN_ENTITY_MESSAGE = "Sorry, I don't recognize the {label} \"{value}\". Please try another one."
BAD_TIMEFRAME_MESSAGE = (
    "Sorry, I don't understand the timeframe \"{value}\". "
    "Please use formats like '7d', '2w', or '1m'."
)


class EntityResolver:
    """Resolver handle owned by the consuming pipeline.

    Categories and platforms come from the cache-backed index; tokens from
    the seed list plus (optionally) a remote search; timeframes from the
    pure parser. Nothing resolves until the cache has been initialized.
    """

    def __init__(
        self,
        cache: EntityCache,
        lookup: LookupService | None = None,
    ) -> None:
        self.cache = cache
        self.lookup = lookup

    @classmethod
    def from_config(
        cls,
        config: ResolverConfig,
        lookup: LookupService | None = None,
        clock: Clock | None = None,
    ) -> EntityResolver:
        """Build index, snapshot store and cache from a config."""
        index = AliasIndex(AliasTables.load(config.alias_tables_path))
        cache = EntityCache(
            index,
            config=config,
            snapshots=SnapshotStore(config.cache_dir),
            clock=clock,
        )
        return cls(cache, lookup=lookup)

    @property
    def index(self) -> AliasIndex:
        return self.cache.index

    @property
    def is_initialized(self) -> bool:
        return self.cache.is_initialized

    async def ensure_fresh(self) -> CacheState:
        return await self.cache.ensure_fresh(self.lookup)

    # ------------------------------------------------------------------
    # Single lookups
    # ------------------------------------------------------------------

    def resolve_category(self, query: str | None) -> str | None:
        if not self.is_initialized:
            return None
        return self.index.resolve_category(query)

    def resolve_platform(self, query: str | None) -> str | None:
        if not self.is_initialized:
            return None
        return self.index.resolve_platform(query)

    async def resolve_token(self, query: str | None) -> str | None:
        if not self.is_initialized:
            return None
        lookup = self.lookup if self.cache.config.enable_dynamic_token_lookup else None
        return await self.index.resolve_token(query, lookup)

    @staticmethod
    def parse_timeframe(expr: str | None) -> TimeframeResult | None:
        return parse_timeframe(expr)

    # ------------------------------------------------------------------
    # Argument bag
    # ------------------------------------------------------------------

    async def resolve_arguments(self, args: Mapping[str, Any]) -> ResolutionOutcome:
        """Replace every present entity field with its canonical form.

        Timeframe fields are kept as given and ``start_date``/``end_date``
        ISO strings are added. The first field that cannot be resolved
        produces a rejection instead.
        """
        await self.ensure_fresh()
        resolved = dict(args)

        for name in CATEGORY_FIELDS:
            value = _present(args, name)
            if value is None:
                continue
            canonical = self.resolve_category(value)
            if canonical is None:
                return _unknown(name, value, "category")
            resolved[name] = canonical

        for name in PLATFORM_FIELDS:
            value = _present(args, name)
            if value is None:
                continue
            canonical = self.resolve_platform(value)
            if canonical is None:
                return _unknown(name, value, "blockchain")
            resolved[name] = canonical

        for name in TOKEN_FIELDS:
            value = _present(args, name)
            if value is None:
                continue
            canonical = await self.resolve_token(value)
            if canonical is None:
                return _unknown(name, value, "token")
            resolved[name] = canonical

        for name in TIMEFRAME_FIELDS:
            value = _present(args, name)
            if value is None:
                continue
            timeframe = parse_timeframe(value)
            if timeframe is None:
                return _reject(name, value, BAD_TIMEFRAME_MESSAGE.format(value=value))
            resolved.update(timeframe.as_iso())

        return ResolutionOutcome(arguments=resolved)

    # ------------------------------------------------------------------
    # Options / stats
    # ------------------------------------------------------------------

    def available_categories(self) -> list[str]:
        return self.index.names(EntityKind.CATEGORY)

    def available_platforms(self) -> list[str]:
        return self.index.names(EntityKind.PLATFORM)

    def cache_info(self) -> CacheInfo:
        state = self.cache.state
        age = None
        if state.last_refresh is not None:
            age = self.cache.clock.seconds_since(state.last_refresh)
        return CacheInfo(
            is_initialized=state.is_initialized,
            categories_count=self.index.size(EntityKind.CATEGORY),
            platforms_count=self.index.size(EntityKind.PLATFORM),
            tokens_count=self.index.size(EntityKind.TOKEN),
            last_refresh=state.last_refresh,
            cache_age_seconds=age,
            source=state.source,
        )


def _present(args: Mapping[str, Any], name: str) -> str | None:
    value = args.get(name)
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _reject(name: str, value: str, message: str) -> ResolutionOutcome:
    logger.info("Could not resolve %s=%r", name, value)
    return ResolutionOutcome(rejection=Rejection(field=name, value=value, message=message))


def _unknown(name: str, value: str, label: str) -> ResolutionOutcome:
    return _reject(name, value, UNKNOWN_ENTITY_MESSAGE.format(label=label, value=value))
