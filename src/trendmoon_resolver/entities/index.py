"""AliasIndex: alias to canonical name tables for categories, platforms and tokens."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from trendmoon_resolver.core.exceptions import SourceUnavailableError
from trendmoon_resolver.core.utils import normalize_alias
from trendmoon_resolver.entities.aliases import (
    AliasTables,
    build_entity,
    generate_aliases,
    generate_platform_aliases,
    token_entity,
)
from trendmoon_resolver.entities.types import CanonicalEntity, EntityKind

if TYPE_CHECKING:
    from trendmoon_resolver.core.protocols import LookupService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _KindTable:
    """Immutable snapshot of one kind's entities and alias mapping."""

    entities: tuple[CanonicalEntity, ...] = ()
    mapping: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(cls, entities: Iterable[CanonicalEntity]) -> _KindTable:
        entities = tuple(entities)
        mapping: dict[str, str] = {}
        for entity in entities:
            for alias in sorted(entity.aliases):
                mapping.pop(alias, None)
                mapping[alias] = entity.name
        return cls(entities=entities, mapping=MappingProxyType(mapping))


class AliasIndex:
    """Deterministic alias → canonical name lookup.

    Each kind's table is built off to the side and swapped in with a single
    assignment, so a reader sees either the old table or the new one.
    Lookups are normalized (lowercased, stripped, collapsed whitespace).
    """

    def __init__(self, tables: AliasTables | None = None) -> None:
        self.tables = tables or AliasTables.load()
        self._kinds: dict[EntityKind, _KindTable] = {kind: _KindTable() for kind in EntityKind}
        self.rebuild_tokens()

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    def rebuild(self, kind: EntityKind, names: Iterable[str]) -> None:
        """Replace the table for ``kind``. Later names win alias collisions."""
        if kind is EntityKind.PLATFORM:
            entities = [build_entity(n, generate_platform_aliases(n, self.tables)) for n in names]
        else:
            entities = [build_entity(n, generate_aliases(n, self.tables)) for n in names]
        self._kinds[kind] = _KindTable.build(entities)
        logger.debug("Rebuilt %s table: %d entities", kind.value, len(entities))

    def rebuild_tokens(self) -> None:
        """Reset the token table to the built-in seed list."""
        self._kinds[EntityKind.TOKEN] = _KindTable.build(
            token_entity(seed, self.tables) for seed in self.tables.token_seeds
        )

    def add_token(self, entity: CanonicalEntity) -> None:
        """Insert a dynamically discovered token."""
        current = self._kinds[EntityKind.TOKEN]
        self._kinds[EntityKind.TOKEN] = _KindTable.build((*current.entities, entity))

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(self, kind: EntityKind, query: str | None) -> str | None:
        """Resolve an alias to its canonical name, or None."""
        if not query:
            return None
        term = normalize_alias(query)
        if not term:
            return None
        table = self._kinds[kind]

        exact = table.mapping.get(term)
        if exact:
            return exact

        if kind is EntityKind.PLATFORM and term in self.tables.platform_disambiguation:
            target = self.tables.platform_disambiguation[term]
            # Only targets present in the current platform table are returned.
            return table.mapping.get(target) if target else None

        return self._scan(table, term)

    def resolve_category(self, query: str | None) -> str | None:
        return self.resolve(EntityKind.CATEGORY, query)

    def resolve_platform(self, query: str | None) -> str | None:
        return self.resolve(EntityKind.PLATFORM, query)

    async def resolve_token(
        self,
        query: str | None,
        lookup: LookupService | None = None,
    ) -> str | None:
        """Resolve a token via the seed list, then a remote search.

        A search hit is added to the token table for later lookups.
        Without ``lookup`` only the seed list is consulted.
        """
        local = self.resolve(EntityKind.TOKEN, query)
        if local or not query or not query.strip() or lookup is None:
            return local

        term = query.strip()
        try:
            matches = await lookup.search_tokens(term, limit=1, order_by="market_cap")
        except SourceUnavailableError as e:
            logger.warning("Token search for %r failed: %s", term, e)
            return None
        if not matches:
            logger.info("No token found for %r", term)
            return None

        entity = token_entity(matches[0], self.tables)
        self.add_token(entity)
        logger.info("Resolved token %r to %s (%s) via search", term, entity.name, entity.id)
        return entity.name

    @staticmethod
    def _scan(table: _KindTable, term: str) -> str | None:
        """Bidirectional substring containment, first hit in insertion order."""
        for alias, name in table.mapping.items():
            if alias in term or term in alias:
                return name
        return None

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def names(self, kind: EntityKind) -> list[str]:
        """Canonical names of ``kind`` in input order."""
        return [e.name for e in self._kinds[kind].entities]

    def entities(self, kind: EntityKind) -> tuple[CanonicalEntity, ...]:
        return self._kinds[kind].entities

    def alias_map(self, kind: EntityKind) -> Mapping[str, str]:
        """Read-only alias → canonical name mapping, in scan order."""
        return self._kinds[kind].mapping

    def size(self, kind: EntityKind) -> int:
        """Number of entities of ``kind``."""
        return len(self._kinds[kind].entities)
