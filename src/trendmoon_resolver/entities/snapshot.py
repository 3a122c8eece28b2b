"""SnapshotStore: timestamped category/platform lists on disk."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from trendmoon_resolver.core.exceptions import CacheCorruptError

logger = logging.getLogger(__name__)

CATEGORIES_PREFIX = "categories"
PLATFORMS_PREFIX = "platforms"

_SNAPSHOT_RE = re.compile(rf"^(?:{CATEGORIES_PREFIX}|{PLATFORMS_PREFIX})_(\d+)\.json$")


@dataclass(frozen=True)
class Snapshot:
    """One category/platform file pair sharing a unix-seconds timestamp."""

    timestamp: int
    categories_path: Path
    platforms_path: Path


def snapshot_timestamp(filename: str) -> int | None:
    """Unix seconds embedded in a snapshot filename, or None."""
    match = _SNAPSHOT_RE.match(filename)
    return int(match.group(1)) if match else None


def read_name_list(path: Path) -> list[str]:
    """Read a JSON array of strings. Raises CacheCorruptError otherwise."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CacheCorruptError(str(path), f"Cannot read {path}: {e}") from e
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        raise CacheCorruptError(str(path), f"{path} is not a JSON array of strings")
    return data


class SnapshotStore:
    """Disk side of the entity cache.

    Snapshots live in ``cache_dir`` as ``categories_<ts>.json`` and
    ``platforms_<ts>.json``. Writing a snapshot removes every older pair, so
    at most one pair survives a completed refresh.
    """

    def __init__(self, cache_dir: str | Path) -> None:
        self.cache_dir = Path(cache_dir)

    def latest(self) -> Snapshot | None:
        """Newest snapshot by embedded timestamp, or None."""
        if not self.cache_dir.is_dir():
            return None
        stamps: list[int] = []
        for path in self.cache_dir.glob(f"{CATEGORIES_PREFIX}_*.json"):
            ts = snapshot_timestamp(path.name)
            if ts is not None:
                stamps.append(ts)
        if not stamps:
            return None
        return self._snapshot(max(stamps))

    def load(self, snapshot: Snapshot) -> tuple[list[str], list[str]]:
        """Read both lists of a snapshot. Raises CacheCorruptError."""
        return read_name_list(snapshot.categories_path), read_name_list(snapshot.platforms_path)

    def write(self, categories: list[str], platforms: list[str], timestamp: int) -> Snapshot:
        """Persist a new snapshot, then prune every other one."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        snapshot = self._snapshot(timestamp)
        snapshot.categories_path.write_text(json.dumps(categories, indent=2), encoding="utf-8")
        snapshot.platforms_path.write_text(json.dumps(platforms, indent=2), encoding="utf-8")
        logger.info("Wrote cache snapshot to %s with timestamp %d", self.cache_dir, timestamp)
        self.prune(keep=timestamp)
        return snapshot

    def prune(self, keep: int | None = None) -> int:
        """Delete snapshot files whose timestamp differs from ``keep``."""
        if not self.cache_dir.is_dir():
            return 0
        removed = 0
        for path in self.cache_dir.iterdir():
            ts = snapshot_timestamp(path.name)
            if ts is None or ts == keep:
                continue
            try:
                path.unlink()
                removed += 1
            except OSError as e:
                logger.warning("Failed to delete old snapshot %s: %s", path, e)
        if removed:
            logger.debug("Pruned %d old snapshot files", removed)
        return removed

    @staticmethod
    def load_static(static_dir: str | Path) -> tuple[list[str], list[str]]:
        """Read the bundled ``categories.json``/``platforms.json`` pair."""
        static_dir = Path(static_dir)
        return (
            read_name_list(static_dir / f"{CATEGORIES_PREFIX}.json"),
            read_name_list(static_dir / f"{PLATFORMS_PREFIX}.json"),
        )

    def _snapshot(self, timestamp: int) -> Snapshot:
        return Snapshot(
            timestamp=timestamp,
            categories_path=self.cache_dir / f"{CATEGORIES_PREFIX}_{timestamp}.json",
            platforms_path=self.cache_dir / f"{PLATFORMS_PREFIX}_{timestamp}.json",
        )
