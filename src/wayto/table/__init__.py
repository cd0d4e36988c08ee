"""Edge transition tables, the map registry and map data loading."""

from .edge_transition_table import EdgeTransitionTable, node_id
from .loader import (
    extract_locations,
    load_registry,
    load_registry_file,
    load_rooms,
    parse_room_ranges,
    read_map_file,
    rooms_by_location,
)
from .map_registry import DataQualityIssue, MapRegistry

__all__ = [
    "EdgeTransitionTable",
    "MapRegistry",
    "DataQualityIssue",
    "node_id",
    "load_registry",
    "load_registry_file",
    "read_map_file",
    "load_rooms",
    "parse_room_ranges",
    "extract_locations",
    "rooms_by_location",
]
