"""Base action executor and execution context.

A script is interpreted one action at a time. Each action kind is handled
by a small executor class registered in ``registry.py``; all of them share
an ``ExecutionContext`` holding the live session, the map registry used for
cross-map calls, and the script's local variables.
"""

from __future__ import annotations

import inspect
import re
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from ..exceptions import ExecutionFailureError, WaytoRuntimeException
from ..model.actions import Action

if TYPE_CHECKING:
    from ..config import WaytoSettings
    from ..table.map_registry import MapRegistry
    from .expression_evaluator import ExpressionEvaluator


@runtime_checkable
class ActionContext(Protocol):
    """The live game session a script runs against.

    Implemented by the game client, not by this package (see
    ``wayto.mock.MockActionContext`` for an in-memory version). Methods may
    be plain functions or coroutines; the executor awaits whatever they
    return.
    """

    async def send(self, line: str) -> None:
        """Emit one command line."""

    async def wait_for_pattern(self, pattern: re.Pattern[str], timeout: float | None = None) -> str | None:
        """Wait for an incoming line matching ``pattern``.

        Returns:
            The full matching line, or None when ``timeout`` elapsed first
        """

    async def sleep(self, seconds: float) -> None:
        """Suspend cooperatively."""

    def is_action_delay_active(self) -> bool:
        """Whether roundtime is currently in effect."""

    async def wait_for_action_delay_clear(self) -> None:
        """Wait until roundtime has expired."""

    def get_external_var(self, key: str) -> Any:
        """Read from the session's persistent key/value store."""

    def set_external_var(self, key: str, value: Any) -> None:
        """Write to the session's persistent key/value store."""

    def has_status(self, name: str) -> bool:
        """Whether the character currently has a status such as "hidden"."""


@dataclass
class ExecutionContext:
    """Shared context for all action executors.

    One context exists per running script. Cross-map calls run the called
    script in a child context with its own local variables and a deeper
    call depth.
    """

    action_context: Any  # ActionContext
    settings: WaytoSettings
    registry: MapRegistry | None

    # Callback used by control flow executors to run nested action sequences
    execute_actions: Callable[[Sequence[Action], ExecutionContext], Awaitable[None]]

    origin: str | None = None
    target_id: str | None = None
    call_depth: int = 0
    variables: dict[str, Any] = field(default_factory=dict)

    _evaluator: ExpressionEvaluator | None = field(default=None, repr=False)

    @property
    def evaluator(self) -> ExpressionEvaluator:
        """Expression evaluator bound to this context."""
        if self._evaluator is None:
            from .expression_evaluator import ExpressionEvaluator

            self._evaluator = ExpressionEvaluator(self)
        return self._evaluator

    def child(self, origin: str | None, target_id: str | None) -> ExecutionContext:
        """Context for a cross-map call: fresh locals, one level deeper."""
        return replace(
            self,
            origin=origin,
            target_id=target_id,
            call_depth=self.call_depth + 1,
            variables={},
            _evaluator=None,
        )

    async def primitive(self, name: str, *args: Any) -> Any:
        """Invoke a primitive of the action context.

        Failures of the underlying session (connection loss, missing
        primitive, ...) are raised as ExecutionFailureError.

        Args:
            name: Method name on the action context
            *args: Arguments for the primitive

        Returns:
            The primitive's result, awaited if it is awaitable

        Raises:
            ExecutionFailureError: If the primitive is missing or fails
        """
        primitive = getattr(self.action_context, name, None)
        if primitive is None:
            raise ExecutionFailureError(f"Action context does not provide '{name}'")

        try:
            result = primitive(*args)
            if inspect.isawaitable(result):
                result = await result
            return result
        except WaytoRuntimeException:
            raise
        except Exception as e:
            raise ExecutionFailureError(f"Action context primitive '{name}' failed", e) from e


class ActionExecutorBase(ABC):
    """Base class for all action executors.

    Each executor handles one or more related action types. ``execute``
    returns normally when the action completed and raises a
    WaytoRuntimeException subclass when it did not.

    Attributes:
        context: Shared execution context
    """

    def __init__(self, context: ExecutionContext) -> None:
        """Initialize with shared execution context.

        Args:
            context: Execution context containing all dependencies
        """
        self.context = context

    @abstractmethod
    async def execute(self, action: Action) -> None:
        """Execute the action.

        Args:
            action: Parsed action of one of the supported types

        Raises:
            ScriptExecutionError: If the action does not complete
            EdgeNotFoundError: If a cross-map call names an unknown edge
        """

    @abstractmethod
    def get_supported_action_types(self) -> list[str]:
        """Get list of action types this executor handles.

        Returns:
            List of action type strings (e.g., ["SEND", "MULTI_SEND"])
        """

    def handles_action_type(self, action_type: str) -> bool:
        """Check if this executor handles the given action type."""
        return action_type in self.get_supported_action_types()

    async def _run_body(self, body: Sequence[Action]) -> None:
        await self.context.execute_actions(body, self.context)
