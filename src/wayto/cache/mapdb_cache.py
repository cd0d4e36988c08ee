"""File-based cache for mapdb exports.

A full mapdb dump is large; reading it from a slow share or a download
location on every start is wasteful. The cache keeps the raw text of the
last file read together with the file's version (its modification time)
and a timestamp, and serves it while it is younger than ``max_age`` and the
source has not changed.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ..config import get_settings
from ..exceptions import ConfigurationError
from ..table.loader import parse_fragment, parse_json, parse_yaml

logger = logging.getLogger(__name__)

CACHE_FORMAT_VERSION = 1
CACHE_FILENAME = "mapdb.json"


@dataclass
class CachedMapDB:
    """A cached mapdb export."""

    source: str
    """Resolved path of the file the text was read from."""

    version: str
    """Version of the source when it was cached."""

    timestamp: float
    """Unix timestamp when the entry was written."""

    suffix: str
    """File extension of the source, selecting the parser."""

    text: str
    """Raw file contents."""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "format": CACHE_FORMAT_VERSION,
            "source": self.source,
            "version": self.version,
            "timestamp": self.timestamp,
            "suffix": self.suffix,
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CachedMapDB:
        """Create from dictionary."""
        if data.get("format") != CACHE_FORMAT_VERSION:
            raise KeyError("format")
        return cls(
            source=data["source"],
            version=data["version"],
            timestamp=float(data["timestamp"]),
            suffix=data["suffix"],
            text=data["text"],
        )

    def parse(self) -> Any:
        """Parse the cached text with the parser for its file type."""
        if self.suffix == ".json":
            return parse_json(self.text)
        if self.suffix in (".yaml", ".yml"):
            return parse_yaml(self.text)
        return parse_fragment(self.text)


@dataclass(frozen=True)
class LoadedMapDB:
    """Result of load_mapdb."""

    data: Any
    version: str
    from_cache: bool
    age: str = "fresh"


class MapDBCache:
    """Single-entry cache of the last mapdb export read.

    Attributes:
        cache_dir: Directory holding the cache file
        max_age: Seconds after which an entry is expired
    """

    def __init__(self, cache_dir: Path | str | None = None, max_age: float | None = None) -> None:
        """Initialize cache storage.

        Args:
            cache_dir: Directory for the cache file. Defaults to settings.cache_path
            max_age: Expiry in seconds. Defaults to settings.cache_max_age_days
        """
        settings = get_settings()
        self.cache_dir = Path(cache_dir) if cache_dir is not None else settings.cache_path.expanduser()
        self.max_age = max_age if max_age is not None else settings.cache_max_age_days * 86400

    @property
    def path(self) -> Path:
        return self.cache_dir / CACHE_FILENAME

    def get(self, source: str | Path | None = None) -> CachedMapDB | None:
        """Return the cached entry, or None when absent, corrupt or expired.

        Args:
            source: When given, entries cached from another file are ignored
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                entry = CachedMapDB.from_dict(json.load(f))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, OSError) as e:
            logger.warning(f"Failed to read mapdb cache {self.path}: {e}")
            self.clear()
            return None

        if time.time() - entry.timestamp > self.max_age:
            logger.info("MapDB cache expired")
            return None
        if source is not None and entry.source != str(Path(source).resolve()):
            return None
        return entry

    def put(self, entry: CachedMapDB) -> bool:
        """Store an entry, replacing the previous one.

        Returns:
            True if stored successfully, False otherwise
        """
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)

            # Write atomically using temp file
            temp_path = self.path.with_suffix(".tmp")
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(entry.to_dict(), f)

            temp_path.replace(self.path)
            return True

        except OSError as e:
            logger.warning(f"Failed to write mapdb cache {self.path}: {e}")
            return False

    def clear(self) -> bool:
        """Delete the cache file.

        Returns:
            True if deleted (or didn't exist), False on error
        """
        try:
            self.path.unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.warning(f"Failed to delete mapdb cache {self.path}: {e}")
            return False

    @staticmethod
    def describe_age(timestamp: float, now: float | None = None) -> str:
        """Human-readable age: "fresh", "3 hours old", "2 days old"."""
        age = (time.time() if now is None else now) - timestamp
        hours = int(age // 3600)
        days = hours // 24
        if days > 0:
            return f"{days} day{'s' if days > 1 else ''} old"
        if hours > 0:
            return f"{hours} hour{'s' if hours > 1 else ''} old"
        return "fresh"


def source_version(path: Path) -> str:
    """Version of a source file: its modification time in nanoseconds."""
    return str(path.stat().st_mtime_ns)


def load_mapdb(
    path: str | Path,
    cache: MapDBCache | None = None,
    force_refresh: bool = False,
) -> LoadedMapDB:
    """Read and parse a mapdb export, going through the cache when given.

    Args:
        path: Map file (.json, .yaml/.yml or .txt)
        cache: Cache to consult and refresh; None reads the file directly
        force_refresh: Ignore any cached entry

    Returns:
        LoadedMapDB with the parsed data

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        version = source_version(path)
        if cache is not None and not force_refresh:
            cached = cache.get(path)
            if cached is not None and cached.version == version:
                age = cache.describe_age(cached.timestamp)
                logger.info(f"Using cached MapDB ({age})")
                return LoadedMapDB(cached.parse(), cached.version, from_cache=True, age=age)

        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read map file {path}", e) from e

    suffix = path.suffix.lower()
    if suffix not in (".json", ".yaml", ".yml", ".txt"):
        raise ConfigurationError(f"Unsupported map file type: {suffix or path.name}")

    entry = CachedMapDB(str(path.resolve()), version, time.time(), suffix, text)
    try:
        data = entry.parse()
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot parse map file {path}", e) from e

    if cache is not None:
        cache.put(entry)
    return LoadedMapDB(data, version, from_cache=False)
