"""Registry for action executors.

Maps each action type to the executor class that handles it. Executor
modules register themselves with the ``@register_executor`` decorator when
the package is imported.
"""

from ..exceptions import ExecutionFailureError
from .base import ActionExecutorBase, ExecutionContext

# Global registry mapping action types to executor classes
_executor_registry: dict[str, type[ActionExecutorBase]] = {}


def register_executor(
    executor_class: type[ActionExecutorBase],
) -> type[ActionExecutorBase]:
    """Register an executor class for its supported action types.

    This can be used as a decorator on executor classes:

    @register_executor
    class CommandActionExecutor(ActionExecutorBase):
        ...

    Args:
        executor_class: Executor class to register

    Returns:
        The same executor class (for use as decorator)

    Raises:
        ValueError: If an action type is already registered to a different executor
    """
    # Only metadata is queried, so no context is needed
    temp_instance = executor_class.__new__(executor_class)
    action_types = temp_instance.get_supported_action_types()

    for action_type in action_types:
        existing_class = _executor_registry.get(action_type)
        if existing_class is not None and existing_class is not executor_class:
            raise ValueError(
                f"Action type '{action_type}' is already registered to "
                f"{existing_class.__name__}, cannot register to {executor_class.__name__}"
            )
        _executor_registry[action_type] = executor_class

    return executor_class


def get_executor_class(action_type: str) -> type[ActionExecutorBase] | None:
    """Get the executor class for an action type.

    Args:
        action_type: Action type string (e.g., "SEND")

    Returns:
        Executor class or None if not found
    """
    return _executor_registry.get(action_type)


def create_executor(action_type: str, context: ExecutionContext) -> ActionExecutorBase:
    """Create an executor instance for an action type.

    Args:
        action_type: Action type string (e.g., "SEND")
        context: Execution context to pass to executor

    Returns:
        Executor instance ready to execute actions

    Raises:
        ExecutionFailureError: If no executor is registered for the action type
    """
    executor_class = get_executor_class(action_type)
    if executor_class is None:
        raise ExecutionFailureError(
            f"No executor registered for action type: {action_type}",
            action_type=action_type,
        )
    return executor_class(context)


def get_registered_action_types() -> list[str]:
    """Get all registered action types."""
    return list(_executor_registry.keys())
