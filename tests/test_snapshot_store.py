"""Tests for the on-disk snapshot store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from trendmoon_resolver.core.exceptions import CacheCorruptError
from trendmoon_resolver.entities.aliases import DATA_DIR
from trendmoon_resolver.entities.snapshot import (
    SnapshotStore,
    read_name_list,
    snapshot_timestamp,
)


def _write_pair(cache_dir: Path, ts: int, categories=("Meme",), platforms=("base",)) -> None:
    cache_dir.mkdir(parents=True, exist_ok=True)
    (cache_dir / f"categories_{ts}.json").write_text(json.dumps(list(categories)))
    (cache_dir / f"platforms_{ts}.json").write_text(json.dumps(list(platforms)))


class TestSnapshotTimestamp:
    def test_valid_names(self):
        assert snapshot_timestamp("categories_1704110400.json") == 1704110400
        assert snapshot_timestamp("platforms_42.json") == 42

    @pytest.mark.parametrize(
        "name",
        ["categories.json", "categories_abc.json", "tokens_1.json", "categories_1.json.tmp"],
    )
    def test_other_names(self, name):
        assert snapshot_timestamp(name) is None


class TestSnapshotStore:
    """SnapshotStore write/read/prune behavior."""

    def test_latest_missing_dir(self, cache_dir: Path):
        assert SnapshotStore(cache_dir).latest() is None

    def test_latest_numeric_order(self, cache_dir: Path):
        _write_pair(cache_dir, 999)
        _write_pair(cache_dir, 1000)
        snapshot = SnapshotStore(cache_dir).latest()
        assert snapshot.timestamp == 1000
        assert snapshot.categories_path == cache_dir / "categories_1000.json"

    def test_write_then_load(self, cache_dir: Path):
        store = SnapshotStore(cache_dir)
        store.write(["Meme", "SocialFi"], ["base", "solana"], 1704110400)
        snapshot = store.latest()
        assert snapshot.timestamp == 1704110400
        assert store.load(snapshot) == (["Meme", "SocialFi"], ["base", "solana"])

    def test_write_leaves_one_pair(self, cache_dir: Path):
        _write_pair(cache_dir, 100)
        _write_pair(cache_dir, 200)
        (cache_dir / "notes.txt").write_text("keep me")

        SnapshotStore(cache_dir).write(["Meme"], ["base"], 300)

        files = sorted(p.name for p in cache_dir.iterdir())
        assert files == ["categories_300.json", "notes.txt", "platforms_300.json"]

    def test_prune_without_dir(self, cache_dir: Path):
        assert SnapshotStore(cache_dir).prune(keep=1) == 0

    def test_load_corrupt(self, cache_dir: Path):
        _write_pair(cache_dir, 100)
        (cache_dir / "platforms_100.json").write_text("{not json")
        store = SnapshotStore(cache_dir)
        with pytest.raises(CacheCorruptError):
            store.load(store.latest())

    def test_load_static_bundled(self):
        categories, platforms = SnapshotStore.load_static(DATA_DIR)
        assert len(categories) == 25
        assert len(platforms) == 23
        assert "Decentralized Finance (DeFi)" in categories
        assert "arbitrum-one" in platforms

    def test_load_static_missing(self, tmp_path: Path):
        with pytest.raises(CacheCorruptError):
            SnapshotStore.load_static(tmp_path / "missing")


class TestReadNameList:
    @pytest.mark.parametrize("content", ['{"a": 1}', "[1, 2]", '["ok", null]', ""])
    def test_rejects_non_string_lists(self, tmp_path: Path, content):
        path = tmp_path / "list.json"
        path.write_text(content)
        with pytest.raises(CacheCorruptError) as exc_info:
            read_name_list(path)
        assert exc_info.value.path == str(path)

    def test_empty_list_is_valid(self, tmp_path: Path):
        path = tmp_path / "list.json"
        path.write_text("[]")
        assert read_name_list(path) == []
