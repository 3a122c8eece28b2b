"""Entity resolution package: alias index, refresh cache and resolver facade."""

from trendmoon_resolver.entities.aliases import AliasTables
from trendmoon_resolver.entities.cache import EntityCache
from trendmoon_resolver.entities.config import ResolverConfig
from trendmoon_resolver.entities.index import AliasIndex
from trendmoon_resolver.entities.resolver import EntityResolver
from trendmoon_resolver.entities.snapshot import Snapshot, SnapshotStore
from trendmoon_resolver.entities.types import (
    CacheInfo,
    CacheState,
    CanonicalEntity,
    EntityKind,
    Rejection,
    ResolutionOutcome,
    TokenMatch,
)

__all__ = [
    "AliasIndex",
    "AliasTables",
    "CacheInfo",
    "CacheState",
    "CanonicalEntity",
    "EntityCache",
    "EntityKind",
    "EntityResolver",
    "Rejection",
    "ResolutionOutcome",
    "ResolverConfig",
    "Snapshot",
    "SnapshotStore",
    "TokenMatch",
]
