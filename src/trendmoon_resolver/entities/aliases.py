"""Alias generation rules and the synonym tables that feed them.

The tables live in ``data/alias_tables.json`` so new chains or categories can
be added without touching code. A different file can be supplied through
``ResolverConfig.alias_tables_path``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from trendmoon_resolver.core.exceptions import ConfigurationError
from trendmoon_resolver.core.utils import normalize_alias
from trendmoon_resolver.entities.types import CanonicalEntity, TokenMatch

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_ALIAS_TABLES = DATA_DIR / "alias_tables.json"

_ACRONYM_RE = re.compile(r"\(([^)]+)\)")

# Platform first words must be longer than 2 characters to become aliases.
_MIN_FIRST_WORD_LENGTH = 3


@dataclass(frozen=True)
class AliasTables:
    """Hand-curated alias data.

    category_synonyms:       lower-cased canonical name → extra aliases
                             (also applied to token names)
    platform_synonyms:       platform slug → extra aliases
    platform_disambiguation: short ticker → platform slug, or None when the
                             ticker names a token with no platform
    token_seeds:             tokens resolvable without a remote search
    """

    category_synonyms: dict[str, tuple[str, ...]] = field(default_factory=dict)
    platform_synonyms: dict[str, tuple[str, ...]] = field(default_factory=dict)
    platform_disambiguation: dict[str, str | None] = field(default_factory=dict)
    token_seeds: tuple[TokenMatch, ...] = ()

    @classmethod
    def load(cls, path: str | Path | None = None) -> AliasTables:
        """Load tables from JSON. Raises ConfigurationError on a bad file."""
        source = Path(path) if path else DEFAULT_ALIAS_TABLES
        try:
            raw = json.loads(source.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot load alias tables from {source}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Alias tables in {source} must be a JSON object")
        tables = cls.from_dict(raw)
        logger.debug(
            "Loaded alias tables from %s: %d category synonyms, %d platform synonyms, "
            "%d disambiguations, %d token seeds",
            source,
            len(tables.category_synonyms),
            len(tables.platform_synonyms),
            len(tables.platform_disambiguation),
            len(tables.token_seeds),
        )
        return tables

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> AliasTables:
        try:
            seeds = tuple(
                TokenMatch(id=str(t["id"]), name=str(t["name"]), symbol=str(t["symbol"]))
                for t in raw.get("token_seeds", [])
            )
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Malformed token seed entry: {e}") from e
        return cls(
            category_synonyms=_synonym_table(raw.get("category_synonyms", {})),
            platform_synonyms=_synonym_table(raw.get("platform_synonyms", {})),
            platform_disambiguation={
                normalize_alias(k): (v.lower() if v else None)
                for k, v in raw.get("platform_disambiguation", {}).items()
            },
            token_seeds=seeds,
        )


def _synonym_table(raw: dict[str, list[str]]) -> dict[str, tuple[str, ...]]:
    return {
        normalize_alias(key): tuple(normalize_alias(a) for a in aliases)
        for key, aliases in raw.items()
    }


def entity_id(name: str) -> str:
    """Lower-cased name with whitespace runs turned into hyphens."""
    return re.sub(r"\s+", "-", name.strip().lower())


def generate_aliases(name: str, tables: AliasTables) -> set[str]:
    """Aliases for a category or token name.

    "Decentralized Finance (DeFi)" → {"decentralized finance (defi)",
    "defi", "decentralized finance"} plus any synonyms keyed by the full name.
    """
    lower = normalize_alias(name)
    aliases = {lower}

    acronym = _ACRONYM_RE.search(name)
    if acronym and acronym.group(1).strip():
        aliases.add(normalize_alias(acronym.group(1)))

    before = normalize_alias(name.split("(")[0])
    if before and before != lower:
        aliases.add(before)

    aliases.update(tables.category_synonyms.get(lower, ()))
    return aliases


def generate_platform_aliases(slug: str, tables: AliasTables) -> set[str]:
    """Aliases for a platform slug.

    "arbitrum-one" → {"arbitrum-one", "arbitrum one", "arbitrum"} plus
    synonyms keyed by the slug.
    """
    lower = normalize_alias(slug)
    aliases = {lower}
    aliases.update(tables.platform_synonyms.get(lower, ()))

    base = normalize_alias(re.sub(r"[-_]", " ", lower))
    if base and base != lower:
        aliases.add(base)
        first_word = base.split(" ")[0]
        if len(first_word) >= _MIN_FIRST_WORD_LENGTH:
            aliases.add(first_word)
    return aliases


def build_entity(name: str, kind_aliases: set[str]) -> CanonicalEntity:
    return CanonicalEntity(id=entity_id(name), name=name, aliases=frozenset(kind_aliases))


def token_entity(match: TokenMatch, tables: AliasTables) -> CanonicalEntity:
    """Canonical token entity from a search result or seed row."""
    aliases = generate_aliases(match.name, tables)
    for extra in (match.symbol, match.id):
        if extra and extra.strip():
            aliases.add(normalize_alias(extra))
    return CanonicalEntity(
        id=match.id or entity_id(match.name),
        name=match.name,
        aliases=frozenset(aliases),
    )
