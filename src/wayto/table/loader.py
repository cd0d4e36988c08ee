"""Loading map data into a MapRegistry.

Two input shapes are accepted:

- a list of room records as exported by mapdb (``[{"id": 1, "wayto":
  {...}, "timeto": {...}, ...}, ...]``)
- a mapping of origin IDs to ``{"wayto": {...}}`` blocks, where loose
  top-level ``"id": "transition"`` entries form the global script pool

JSON and YAML parsers here keep every duplicate key they encounter, so a
wayto block that lists the same target twice is never resolved silently.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..config import WaytoSettings, get_settings
from ..dsl import StringprocParser
from ..exceptions import ConfigurationError, DuplicateEdgeError, ScriptParseError
from ..model.room import Room
from ..model.transition import Transition
from .edge_transition_table import EdgeTransitionTable, node_id
from .map_registry import DataQualityIssue, MapRegistry

logger = logging.getLogger(__name__)


class _TrackingDict(dict):
    """Dict that remembers keys assigned more than once during parsing."""

    def __init__(self) -> None:
        super().__init__()
        self.duplicates: list[tuple[Any, Any, Any]] = []

    def record(self, key: Any, value: Any) -> None:
        if key in self:
            self.duplicates.append((key, self[key], value))
        else:
            self[key] = value


def _tracking_pairs(pairs: list[tuple[Any, Any]]) -> _TrackingDict:
    result = _TrackingDict()
    for key, value in pairs:
        result.record(key, value)
    return result


class _DuplicateTrackingLoader(yaml.SafeLoader):
    """SafeLoader whose mappings are _TrackingDicts."""


def _construct_tracking_mapping(loader: yaml.SafeLoader, node: yaml.MappingNode) -> _TrackingDict:
    loader.flatten_mapping(node)
    result = _TrackingDict()
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=True)
        value = loader.construct_object(value_node, deep=True)
        result.record(key, value)
    return result


_DuplicateTrackingLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_tracking_mapping
)


def parse_json(text: str) -> Any:
    """Parse JSON, keeping duplicate keys visible to the loader."""
    return json.loads(text, object_pairs_hook=_tracking_pairs)


def parse_yaml(text: str) -> Any:
    """Parse YAML, keeping duplicate keys visible to the loader."""
    return yaml.load(text, Loader=_DuplicateTrackingLoader)


_FRAGMENT_OPEN = re.compile(r"""^(\s*(?:"[^"]*"|'[^']*'|[\w-]+)\s*:)\s*\{\s*$""")
_FRAGMENT_BRACE = re.compile(r"^\s*[{}],?\s*$")
_TRAILING_COMMA = re.compile(r",\s*$")


def parse_fragment(text: str) -> Any:
    """Parse a bare listing of ``"id": "transition"`` lines.

    Fragments copied out of a mapdb dump carry ``#`` comments and separate
    their entries with a trailing comma or not at all. Each line becomes a
    line of block YAML: separators and lone braces are dropped, and a
    ``"wayto": {`` line opens a nested mapping. Entries must fit on one line.
    """
    lines = []
    for line in text.splitlines():
        if _FRAGMENT_BRACE.match(line):
            continue
        opened = _FRAGMENT_OPEN.match(line)
        if opened:
            lines.append(opened.group(1))
        else:
            lines.append(_TRAILING_COMMA.sub("", line))
    return parse_yaml("\n".join(lines))


class _Builder:
    """Accumulates tables and issues for one load."""

    def __init__(self, parser: StringprocParser, strict: bool) -> None:
        self.parser = parser
        self.strict = strict
        self.tables: dict[str, EdgeTransitionTable] = {}
        self.issues: list[DataQualityIssue] = []

    def issue(self, kind: str, origin: str | None, target_id: str | None, detail: str) -> None:
        logger.warning(f"{kind}: {detail}")
        self.issues.append(DataQualityIssue(kind, origin, target_id, detail))

    def check_duplicates(self, block: Mapping[Any, Any], origin: str | None) -> None:
        for key, first, second in getattr(block, "duplicates", ()):
            target_id = _key(key)
            if first != second:
                raise DuplicateEdgeError(target_id, origin, str(first), str(second))
            if isinstance(first, Mapping):
                self.issue("duplicate_origin", target_id, None, f"Origin {target_id} defined twice identically")
            else:
                self.issue(
                    "duplicate_edge",
                    origin,
                    target_id,
                    f"Target {target_id} listed twice under {origin or '<global>'} with the same transition",
                )

    def transitions(self, wayto: Mapping[Any, Any], origin: str | None) -> dict[str, Transition]:
        self.check_duplicates(wayto, origin)
        result: dict[str, Transition] = {}
        for key, text in wayto.items():
            target_id = _key(key)
            if not isinstance(text, str):
                raise ConfigurationError(
                    f"Transition {origin or '<global>'} -> {target_id} is not text: {text!r}",
                    config_key=target_id,
                )
            try:
                result[target_id] = self.parser.parse_transition(text, origin, target_id)
            except ScriptParseError as e:
                if self.strict:
                    raise
                self.issue("invalid_script", origin, target_id, str(e))
        return result

    def add_table(self, table: EdgeTransitionTable) -> None:
        origin = table.origin
        assert origin is not None
        if origin in self.tables:
            raise ConfigurationError(f"Origin {origin} is defined twice", config_key=origin)
        self.tables[origin] = table


def load_registry(
    data: Any,
    settings: WaytoSettings | None = None,
    strict: bool | None = None,
) -> MapRegistry:
    """Build a registry from already-parsed map data.

    Args:
        data: List of room records, or mapping of origin blocks and loose scripts
        settings: Settings supplying the script marker and strictness
        strict: Overrides ``settings.strict_loading`` when given

    Returns:
        Immutable MapRegistry

    Raises:
        ConfigurationError: If the data has the wrong shape or an origin repeats
        DuplicateEdgeError: If a wayto block lists one target with two transitions
        ScriptParseError: If a script does not parse and loading is strict
    """
    settings = settings or get_settings()
    builder = _Builder(
        StringprocParser(settings.script_marker),
        settings.strict_loading if strict is None else strict,
    )

    if isinstance(data, Mapping):
        global_pool = _load_mapping(data, builder)
    elif isinstance(data, list):
        _load_rooms(data, builder)
        global_pool = None
    else:
        raise ConfigurationError(f"Map data must be a list or a mapping, got {type(data).__name__}")

    registry = MapRegistry(builder.tables, global_pool, builder.issues)
    logger.info(
        f"Loaded {len(registry)} origins, {len(registry.global_pool)} global scripts, "
        f"{len(builder.issues)} data quality issues"
    )
    return registry


def _load_mapping(data: Mapping[Any, Any], builder: _Builder) -> EdgeTransitionTable:
    builder.check_duplicates(data, None)

    loose: dict[Any, Any] = {}
    for key, value in data.items():
        origin = _key(key)
        if isinstance(value, str):
            loose[key] = value
        elif isinstance(value, Mapping) and "wayto" in value:
            wayto = value["wayto"] or {}
            if not isinstance(wayto, Mapping):
                raise ConfigurationError(f"wayto of origin {origin} is not a mapping", config_key=origin)
            builder.add_table(
                EdgeTransitionTable(
                    origin,
                    builder.transitions(wayto, origin),
                    timeto=_timeto(value.get("timeto"), origin),
                )
            )
        else:
            raise ConfigurationError(
                f"Entry {origin} is neither a transition nor a wayto block", config_key=origin
            )

    return EdgeTransitionTable(None, builder.transitions(loose, None))


def _load_rooms(records: list[Any], builder: _Builder) -> None:
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise ConfigurationError(f"Room record #{index} is not a mapping")
        if "wayto" in record and isinstance(record["wayto"], Mapping):
            builder.check_duplicates(record["wayto"], _key(record.get("id", index)))
        try:
            room = Room.model_validate(dict(record))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid room record #{index}", e) from e

        origin = node_id(room.id)
        builder.add_table(
            EdgeTransitionTable(
                origin,
                builder.transitions(room.wayto, origin),
                timeto=room.timeto,
                room=room,
            )
        )


def _timeto(value: Any, origin: str) -> dict[str, float | str | None]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"timeto of origin {origin} is not a mapping", config_key=origin)
    return {_key(k): v for k, v in value.items()}


def _key(value: Any) -> str:
    try:
        return node_id(value)
    except TypeError as e:
        raise ConfigurationError(f"Invalid node ID: {value!r}", e) from e


def read_map_file(path: str | Path) -> Any:
    """Read and parse a map file by extension (.json, .yaml/.yml, .txt).

    Raises:
        ConfigurationError: If the file cannot be read, parsed, or has an
            unknown extension
    """
    path = Path(path)
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read map file {path}", e) from e

    try:
        if suffix == ".json":
            return parse_json(text)
        if suffix in (".yaml", ".yml"):
            return parse_yaml(text)
        if suffix == ".txt":
            return parse_fragment(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot parse map file {path}", e) from e

    raise ConfigurationError(f"Unsupported map file type: {suffix or path.name}")


def load_registry_file(
    path: str | Path,
    settings: WaytoSettings | None = None,
    strict: bool | None = None,
) -> MapRegistry:
    """Read a map file and build a registry from it."""
    logger.debug(f"Loading map data from {path}")
    return load_registry(read_map_file(path), settings=settings, strict=strict)


def load_rooms(data: Iterable[Mapping[str, Any]]) -> list[Room]:
    """Validate raw mapdb records into Room models."""
    rooms = []
    for index, record in enumerate(data):
        try:
            rooms.append(Room.model_validate(dict(record)))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid room record #{index}", e) from e
    return rooms


def parse_room_ranges(text: str) -> list[int]:
    """Expand a room range listing such as ``"35593-35601, 35608"``.

    Returns:
        Sorted, de-duplicated room IDs

    Raises:
        ConfigurationError: If a part is not an ID or an ascending ``start-end`` range
    """
    ids: set[int] = set()
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                start_text, end_text = part.split("-", 1)
                start, end = int(start_text), int(end_text)
                if start > end:
                    raise ValueError(f"descending range {part!r}")
                ids.update(range(start, end + 1))
            else:
                ids.add(int(part))
        except ValueError as e:
            raise ConfigurationError(f"Invalid room range: {part!r}", e, config_key=part) from e
    return sorted(ids)


def extract_locations(rooms: Iterable[Room]) -> list[str]:
    """Sorted distinct locations of the given rooms."""
    return sorted({room.location for room in rooms if room.location})


def rooms_by_location(rooms: Iterable[Room], location: str) -> list[Room]:
    return [room for room in rooms if room.location == location]
