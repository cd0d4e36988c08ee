"""Tests for MapDBCache and load_mapdb."""

import json
import os
import time

import pytest

from wayto.cache import CachedMapDB, MapDBCache, load_mapdb
from wayto.exceptions import ConfigurationError


class TestMapDBCache:
    """Storage of the last mapdb export read."""

    def test_empty_cache_misses(self, tmp_path):
        assert MapDBCache(tmp_path).get() is None

    def test_put_then_get(self, tmp_path):
        cache = MapDBCache(tmp_path)
        entry = CachedMapDB("/maps/mapdb.json", "1", time.time(), ".json", "[]")
        assert cache.put(entry)
        cached = cache.get()
        assert cached == entry
        assert not (tmp_path / "mapdb.tmp").exists()

    def test_expired_entry_misses(self, tmp_path):
        cache = MapDBCache(tmp_path, max_age=60)
        cache.put(CachedMapDB("/maps/mapdb.json", "1", time.time() - 120, ".json", "[]"))
        assert cache.get() is None

    def test_other_source_misses(self, tmp_path):
        cache = MapDBCache(tmp_path)
        cache.put(CachedMapDB(str(tmp_path / "a.json"), "1", time.time(), ".json", "[]"))
        assert cache.get(tmp_path / "b.json") is None
        assert cache.get(tmp_path / "a.json") is not None

    def test_corrupt_file_is_removed(self, tmp_path):
        cache = MapDBCache(tmp_path)
        cache.path.write_text("{broken")
        assert cache.get() is None
        assert not cache.path.exists()

    def test_old_format_is_ignored(self, tmp_path):
        cache = MapDBCache(tmp_path)
        cache.path.write_text(json.dumps({"format": 0, "data": []}))
        assert cache.get() is None

    def test_clear(self, tmp_path):
        cache = MapDBCache(tmp_path)
        cache.put(CachedMapDB("x", "1", time.time(), ".json", "[]"))
        assert cache.clear()
        assert cache.get() is None

    def test_defaults_come_from_settings(self, tmp_path):
        cache = MapDBCache()
        assert cache.cache_dir == tmp_path / "cache"
        assert cache.max_age == 7 * 86400

    @pytest.mark.parametrize(
        "age,expected",
        [(60, "fresh"), (3600, "1 hour old"), (3 * 3600, "3 hours old"), (86400, "1 day old"), (2 * 86400 + 5, "2 days old")],
    )
    def test_describe_age(self, age, expected):
        assert MapDBCache.describe_age(1000.0, now=1000.0 + age) == expected


class TestLoadMapDB:
    """Reading map files through the cache."""

    def test_without_cache(self, mapdb_file, mapdb_rooms):
        loaded = load_mapdb(mapdb_file)
        assert not loaded.from_cache
        assert loaded.data == mapdb_rooms

    def test_second_load_uses_cache(self, tmp_path, mapdb_file):
        cache = MapDBCache(tmp_path / "c")
        first = load_mapdb(mapdb_file, cache=cache)
        second = load_mapdb(mapdb_file, cache=cache)
        assert not first.from_cache
        assert second.from_cache
        assert second.data == first.data
        assert second.version == first.version

    def test_force_refresh(self, tmp_path, mapdb_file):
        cache = MapDBCache(tmp_path / "c")
        load_mapdb(mapdb_file, cache=cache)
        assert not load_mapdb(mapdb_file, cache=cache, force_refresh=True).from_cache

    def test_changed_source_is_reread(self, tmp_path, mapdb_file):
        cache = MapDBCache(tmp_path / "c")
        load_mapdb(mapdb_file, cache=cache)
        mapdb_file.write_text("[]")
        stat = mapdb_file.stat()
        os.utime(mapdb_file, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))
        loaded = load_mapdb(mapdb_file, cache=cache)
        assert not loaded.from_cache
        assert loaded.data == []

    def test_cached_text_keeps_duplicates_visible(self, tmp_path):
        path = tmp_path / "dup.json"
        path.write_text('{"1": {"wayto": {"2": "north", "2": "north"}}}')
        cache = MapDBCache(tmp_path / "c")
        load_mapdb(path, cache=cache)
        loaded = load_mapdb(path, cache=cache)
        assert loaded.from_cache
        assert loaded.data["1"]["wayto"].duplicates == [("2", "north", "north")]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_mapdb(tmp_path / "absent.json")

    def test_unparsable_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("a: [unclosed")
        with pytest.raises(ConfigurationError):
            load_mapdb(path)
