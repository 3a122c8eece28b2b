"""Configuration for the entity resolver and its cache."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

from trendmoon_resolver.core.exceptions import ConfigurationError
from trendmoon_resolver.entities.aliases import DATA_DIR

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class ResolverConfig:
    """Cache windows, directories and feature flags.

    Defaults match the agent's original behavior: a 60 minute window, disk
    snapshots under ./cache and the static lists bundled with the package.
    """

    cache_duration_minutes: float = 60
    cache_dir: Path = field(default_factory=lambda: Path("./cache"))
    static_dir: Path = field(default_factory=lambda: DATA_DIR)
    alias_tables_path: Path | None = None
    enable_disk_cache: bool = True
    enable_dynamic_token_lookup: bool = True

    def __post_init__(self) -> None:
        if self.cache_duration_minutes < 0:
            raise ConfigurationError(
                f"cache_duration_minutes must be >= 0, got {self.cache_duration_minutes}"
            )
        self.cache_dir = Path(self.cache_dir)
        self.static_dir = Path(self.static_dir)
        if self.alias_tables_path is not None:
            self.alias_tables_path = Path(self.alias_tables_path)

    @property
    def cache_duration(self) -> timedelta:
        return timedelta(minutes=self.cache_duration_minutes)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ResolverConfig:
        """Build a config from ENTITY_* environment variables."""
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        if "ENTITY_CACHE_DURATION_MINUTES" in env:
            raw = env["ENTITY_CACHE_DURATION_MINUTES"]
            try:
                kwargs["cache_duration_minutes"] = float(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"ENTITY_CACHE_DURATION_MINUTES must be a number, got {raw!r}"
                ) from e
        if env.get("ENTITY_CACHE_DIR"):
            kwargs["cache_dir"] = Path(env["ENTITY_CACHE_DIR"])
        if env.get("ENTITY_FALLBACK_DIR"):
            kwargs["static_dir"] = Path(env["ENTITY_FALLBACK_DIR"])
        if env.get("ENTITY_ALIAS_TABLES"):
            kwargs["alias_tables_path"] = Path(env["ENTITY_ALIAS_TABLES"])
        if "ENTITY_DISK_CACHE" in env:
            kwargs["enable_disk_cache"] = _flag("ENTITY_DISK_CACHE", env["ENTITY_DISK_CACHE"])
        if "ENTITY_DYNAMIC_TOKENS" in env:
            kwargs["enable_dynamic_token_lookup"] = _flag(
                "ENTITY_DYNAMIC_TOKENS", env["ENTITY_DYNAMIC_TOKENS"]
            )

        return cls(**kwargs)  # type: ignore[arg-type]


def _flag(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")
