"""Edge transition table: one origin's wayto entries.

The table is built once by the loader and is read-only afterwards, so any
number of sessions may share it without locking.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ..exceptions import EdgeNotFoundError, TransitionKindError
from ..model.room import Room
from ..model.transition import Direction, Script, Transition

if TYPE_CHECKING:
    from ..action_executors.script_executor import ExecutionResult, ScriptExecutor


def node_id(value: Any) -> str:
    """Normalise a node ID: integers and strings both map to the decimal text."""
    if isinstance(value, bool):
        raise TypeError(f"Not a node ID: {value!r}")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    raise TypeError(f"Not a node ID: {value!r}")


class EdgeTransitionTable:
    """Maps target node IDs to the transition that reaches them from one origin.

    Example:
        >>> table = EdgeTransitionTable("28908", {"28907": Direction("south")})
        >>> table.lookup(28907)
        Direction(token='south')
        >>> table.get("1") is None
        True

    Attributes:
        origin: Origin node ID, or None for the global script pool
        room: Room record the table was loaded from, when available
    """

    def __init__(
        self,
        origin: str | None,
        transitions: Mapping[str, Transition],
        timeto: Mapping[str, float | str | None] | None = None,
        room: Room | None = None,
    ) -> None:
        self._origin = origin
        self._transitions: Mapping[str, Transition] = MappingProxyType(
            {node_id(key): value for key, value in transitions.items()}
        )
        self._timeto: Mapping[str, float | str | None] = MappingProxyType(
            {node_id(key): value for key, value in (timeto or {}).items()}
        )
        self._room = room

    @property
    def origin(self) -> str | None:
        return self._origin

    @property
    def room(self) -> Room | None:
        return self._room

    def lookup(self, target_id: str | int) -> Transition:
        """Return the transition registered for ``target_id``.

        Raises:
            EdgeNotFoundError: If the target is not in this table
        """
        try:
            return self._transitions[node_id(target_id)]
        except KeyError:
            raise EdgeNotFoundError(node_id(target_id), self._origin) from None

    def get(self, target_id: str | int, default: Transition | None = None) -> Transition | None:
        """Like lookup, but returns ``default`` instead of raising."""
        return self._transitions.get(node_id(target_id), default)

    @staticmethod
    def resolve_direction(transition: Transition) -> Direction:
        """Return the direction of a Direction-kind transition.

        Raises:
            TransitionKindError: If the transition is a script
        """
        if not isinstance(transition, Direction):
            raise TransitionKindError("direction", transition.kind.value)
        return transition

    def timeto(self, target_id: str | int) -> float | str | None:
        """Travel cost of an edge: seconds, a cost script, or None if unknown."""
        return self._timeto.get(node_id(target_id))

    def targets(self) -> list[str]:
        return list(self._transitions)

    def items(self) -> list[tuple[str, Transition]]:
        return list(self._transitions.items())

    def directions(self) -> dict[str, Direction]:
        return {k: v for k, v in self._transitions.items() if isinstance(v, Direction)}

    def scripts(self) -> dict[str, Script]:
        return {k: v for k, v in self._transitions.items() if isinstance(v, Script)}

    def as_mapping(self) -> Mapping[str, Transition]:
        """Read-only view of the whole table."""
        return self._transitions

    async def execute(
        self,
        transition: Transition,
        action_context: Any,
        executor: ScriptExecutor | None = None,
    ) -> ExecutionResult:
        """Execute one of this table's transitions against a session.

        Args:
            transition: Transition obtained from this table
            action_context: Live session implementing ActionContext
            executor: Executor to use; pass a registry-bound one (see
                MapRegistry.executor) when scripts make cross-map calls

        Returns:
            ExecutionResult of the run
        """
        if executor is None:
            from ..action_executors import ScriptExecutor

            executor = ScriptExecutor()

        target_id = next((k for k, v in self._transitions.items() if v is transition), None)
        return await executor.execute(
            transition, action_context, origin=self._origin, target_id=target_id
        )

    def __contains__(self, target_id: object) -> bool:
        try:
            return node_id(target_id) in self._transitions
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._transitions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._transitions)

    def __repr__(self) -> str:
        return f"EdgeTransitionTable(origin={self._origin!r}, edges={len(self._transitions)})"
