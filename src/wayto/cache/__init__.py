"""Cache for mapdb exports."""

from .mapdb_cache import CachedMapDB, LoadedMapDB, MapDBCache, load_mapdb

__all__ = ["MapDBCache", "CachedMapDB", "LoadedMapDB", "load_mapdb"]
