"""Map registry: every origin's table plus the global script pool.

The registry is what scripts use for ``Map[7].wayto['3668'].call`` and what
callers use for lookups by (origin, target). It is injected into the
script executor, so tables never hold references to each other.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ..exceptions import EdgeNotFoundError
from ..model.room import Room
from ..model.transition import Transition
from .edge_transition_table import EdgeTransitionTable, node_id

if TYPE_CHECKING:
    from ..action_executors.script_executor import ExecutionResult, ScriptExecutor
    from ..config import WaytoSettings


@dataclass(frozen=True)
class DataQualityIssue:
    """A defect found in the source map data while loading.

    Attributes:
        kind: "duplicate_edge", "duplicate_origin" or "invalid_script"
        origin: Origin block the defect was found in (None for the global pool)
        target_id: Affected target ID, if any
        detail: Human-readable description
    """

    kind: str
    origin: str | None
    target_id: str | None
    detail: str


class MapRegistry:
    """Immutable registry of edge transition tables keyed by origin ID."""

    def __init__(
        self,
        tables: Mapping[str, EdgeTransitionTable],
        global_pool: EdgeTransitionTable | None = None,
        issues: Sequence[DataQualityIssue] = (),
    ) -> None:
        self._tables: Mapping[str, EdgeTransitionTable] = MappingProxyType(dict(tables))
        self._global_pool = global_pool or EdgeTransitionTable(None, {})
        self._issues = tuple(issues)

    @property
    def global_pool(self) -> EdgeTransitionTable:
        """Loose top-level scripts, consulted when an origin lookup misses."""
        return self._global_pool

    @property
    def issues(self) -> tuple[DataQualityIssue, ...]:
        """Data-quality defects recorded while loading."""
        return self._issues

    def get_table(self, map_id: str | int) -> EdgeTransitionTable | None:
        return self._tables.get(node_id(map_id))

    def lookup(self, origin: str | int, target_id: str | int) -> Transition:
        """Resolve an edge from ``origin``, falling back to the global pool.

        Raises:
            EdgeNotFoundError: If neither the origin's table nor the pool has it
        """
        table = self.get_table(origin)
        if table is not None:
            transition = table.get(target_id)
            if transition is not None:
                return transition

        transition = self._global_pool.get(target_id)
        if transition is not None:
            return transition

        context = None if table is not None else "unknown origin"
        raise EdgeNotFoundError(node_id(target_id), node_id(origin), context)

    def lookup_foreign(self, map_id: str | int, target_id: str | int) -> Transition:
        """Resolve an explicit (map-id, target-id) pair, without pool fallback.

        Raises:
            EdgeNotFoundError: If the map or the edge does not exist
        """
        table = self.get_table(map_id)
        if table is None:
            raise EdgeNotFoundError(node_id(target_id), node_id(map_id), "unknown map")
        return table.lookup(target_id)

    def get(self, origin: str | int, target_id: str | int) -> Transition | None:
        try:
            return self.lookup(origin, target_id)
        except EdgeNotFoundError:
            return None

    def origins(self) -> list[str]:
        return list(self._tables)

    def tables(self) -> list[EdgeTransitionTable]:
        return list(self._tables.values())

    def rooms(self) -> list[Room]:
        return [table.room for table in self._tables.values() if table.room is not None]

    def locations(self) -> list[str]:
        """Sorted distinct room locations."""
        return sorted({room.location for room in self.rooms() if room.location})

    def rooms_by_location(self, location: str) -> list[Room]:
        return [room for room in self.rooms() if room.location == location]

    def executor(self, settings: WaytoSettings | None = None) -> ScriptExecutor:
        """A script executor that resolves cross-map calls against this registry."""
        from ..action_executors import ScriptExecutor

        return ScriptExecutor(self, settings)

    async def traverse(
        self, origin: str | int, target_id: str | int, action_context: Any
    ) -> ExecutionResult:
        """Look up ``origin -> target_id`` and execute it against ``action_context``."""
        return await self.executor().traverse(node_id(origin), node_id(target_id), action_context)

    def __contains__(self, map_id: object) -> bool:
        try:
            return node_id(map_id) in self._tables
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._tables)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __repr__(self) -> str:
        return (
            f"MapRegistry(origins={len(self._tables)}, "
            f"global_scripts={len(self._global_pool)}, issues={len(self._issues)})"
        )
