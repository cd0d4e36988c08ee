"""Script executor that routes actions to the specialized executors.

``ScriptExecutor.execute`` is the entry point for running a transition:
it serialises scripts per action context, walks the action sequence,
delegates each action to its registered executor, and turns failures into
an ``ExecutionResult`` that names the action that did not complete.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..config import WaytoSettings, get_settings
from ..exceptions import ExecutionFailureError, WaytoRuntimeException
from ..logging import TransitionLogger
from ..model.actions import Action, Send
from ..model.expressions import Literal
from ..model.transition import Direction, Transition
from .base import ExecutionContext
from .registry import create_executor, get_registered_action_types

if TYPE_CHECKING:
    from ..table.map_registry import MapRegistry

logger = logging.getLogger(__name__)

# One lock per live session keeps its command stream ordered. Keyed by id();
# an entry exists only while a script holds or awaits the lock.
_session_locks: dict[int, asyncio.Lock] = {}
_session_users: dict[int, int] = {}


@asynccontextmanager
async def _session_lock(action_context: Any) -> AsyncIterator[None]:
    key = id(action_context)
    lock = _session_locks.setdefault(key, asyncio.Lock())
    _session_users[key] = _session_users.get(key, 0) + 1
    try:
        async with lock:
            yield
    finally:
        _session_users[key] -= 1
        if not _session_users[key]:
            del _session_users[key]
            del _session_locks[key]


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of executing one transition.

    Attributes:
        success: True when every action completed
        origin: Origin the transition was taken from, if known
        target_id: Target the transition leads to, if known
        failed_action: Innermost action that did not complete
        error: Cause of the failure
        duration: Wall-clock seconds spent executing
    """

    success: bool
    origin: str | None = None
    target_id: str | None = None
    failed_action: Action | None = None
    error: Exception | None = None
    duration: float = 0.0

    @property
    def failed_action_type(self) -> str | None:
        return self.failed_action.action_type if self.failed_action else None

    def __bool__(self) -> bool:
        return self.success


class ScriptExecutor:
    """Runs transitions against an action context.

    Example:
        >>> registry = load_registry_file("mapdb.json")
        >>> executor = ScriptExecutor(registry)
        >>> result = await executor.execute(registry.lookup("28908", "26905"), session)
        >>> result.success
        True

    Attributes:
        registry: Map registry used to resolve cross-map calls (optional)
        settings: Execution settings
    """

    def __init__(
        self,
        registry: MapRegistry | None = None,
        settings: WaytoSettings | None = None,
        transition_logger: TransitionLogger | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            registry: Registry for cross-map calls; without one they fail
            settings: Settings, defaults to the global settings
            transition_logger: Structured logger for traversal events
        """
        self.registry = registry
        self.settings = settings or get_settings()
        self.transition_logger = transition_logger or TransitionLogger()
        logger.debug(
            f"ScriptExecutor initialized with {len(get_registered_action_types())} "
            f"registered action types"
        )

    async def execute(
        self,
        transition: Transition,
        action_context: Any,
        origin: str | None = None,
        target_id: str | None = None,
    ) -> ExecutionResult:
        """Execute a transition.

        A Direction is executed as a single movement send of its token; a
        Script runs its actions in order. Only one transition runs against a
        given action context at a time.

        Args:
            transition: Direction or Script to execute
            action_context: Live session implementing ActionContext
            origin: Origin node, for logging and nested calls
            target_id: Target node, for logging

        Returns:
            ExecutionResult; failures carry the failed action and its cause
        """
        if isinstance(transition, Direction):
            actions: Sequence[Action] = (Send(Literal(transition.token), move=True),)
        else:
            actions = transition.actions

        context = ExecutionContext(
            action_context=action_context,
            settings=self.settings,
            registry=self.registry,
            execute_actions=self._execute_actions,
            origin=origin,
            target_id=target_id,
        )

        log_context = self.transition_logger.log_transition_start(
            origin, target_id or "?", transition.kind.value
        )
        loop = asyncio.get_running_loop()
        started = loop.time()

        async with _session_lock(action_context):
            try:
                await self._execute_actions(actions, context)
            except WaytoRuntimeException as e:
                failed_action = e.failed_action
                self.transition_logger.log_transition_end(
                    log_context,
                    success=False,
                    failed_action=failed_action.action_type if failed_action else None,
                    error=e,
                )
                return ExecutionResult(
                    success=False,
                    origin=origin,
                    target_id=target_id,
                    failed_action=failed_action,
                    error=e,
                    duration=loop.time() - started,
                )

        self.transition_logger.log_transition_end(log_context, success=True)
        return ExecutionResult(
            success=True,
            origin=origin,
            target_id=target_id,
            duration=loop.time() - started,
        )

    async def traverse(self, origin: str, target_id: str, action_context: Any) -> ExecutionResult:
        """Look up the edge ``origin -> target_id`` and execute it.

        Raises:
            ExecutionFailureError: If the executor has no registry
            EdgeNotFoundError: If neither the origin nor the global pool has the edge
        """
        if self.registry is None:
            raise ExecutionFailureError("traverse() needs a map registry")
        transition = self.registry.lookup(origin, target_id)
        return await self.execute(transition, action_context, origin=str(origin), target_id=str(target_id))

    async def _execute_actions(self, actions: Sequence[Action], context: ExecutionContext) -> None:
        """Run actions in order, tagging failures with the innermost failed action."""
        for action in actions:
            try:
                executor = create_executor(action.action_type, context)
                await executor.execute(action)
            except WaytoRuntimeException as e:
                if e.failed_action is None:
                    e.failed_action = action
                raise
            except Exception as e:
                error = ExecutionFailureError(
                    f"{action.action_type} failed", e, action_type=action.action_type
                )
                error.failed_action = action
                raise error from e
