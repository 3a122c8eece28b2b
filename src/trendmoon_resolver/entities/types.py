"""Data types for the entity resolution system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class EntityKind(str, Enum):
    """The three independent alias tables."""

    CATEGORY = "category"
    PLATFORM = "platform"
    TOKEN = "token"


@dataclass(frozen=True)
class CanonicalEntity:
    """A canonical name with the lower-cased aliases that map to it."""

    id: str
    name: str
    aliases: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class TokenMatch:
    """One row of a remote token search."""

    id: str
    name: str
    symbol: str


@dataclass
class CacheState:
    """Refresh bookkeeping owned by ``EntityCache``."""

    is_initialized: bool = False
    last_refresh: datetime | None = None
    source: str | None = None
    last_error: str | None = None


@dataclass
class CacheInfo:
    """Cache statistics exposed to the consuming pipeline."""

    is_initialized: bool
    categories_count: int
    platforms_count: int
    tokens_count: int
    last_refresh: datetime | None = None
    cache_age_seconds: float | None = None
    source: str | None = None


@dataclass(frozen=True)
class Rejection:
    """A field of the argument bag that could not be resolved."""

    field: str
    value: str
    message: str


@dataclass
class ResolutionOutcome:
    """Result of ``EntityResolver.resolve_arguments``."""

    arguments: dict[str, Any] = field(default_factory=dict)
    rejection: Rejection | None = None

    @property
    def ok(self) -> bool:
        return self.rejection is None
