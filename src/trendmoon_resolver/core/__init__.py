"""Core protocols, exceptions and helpers for the Trendmoon resolver."""

from trendmoon_resolver.core.exceptions import (
    CacheCorruptError,
    CacheUnavailableError,
    ConfigurationError,
    ResolverError,
    SourceUnavailableError,
)
from trendmoon_resolver.core.protocols import LookupService
from trendmoon_resolver.core.utils import normalize_alias, utc_now

__all__ = [
    # Protocols
    "LookupService",
    # Exceptions
    "CacheCorruptError",
    "CacheUnavailableError",
    "ConfigurationError",
    "ResolverError",
    "SourceUnavailableError",
    # Utils
    "normalize_alias",
    "utc_now",
]
