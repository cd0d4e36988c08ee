"""Action executors for transition scripts.

Each executor handles a group of related action types and registers itself
in the executor registry when its module is imported.

Architecture:
    - ActionContext: protocol of the live game session (consumed, not implemented)
    - ExecutionContext: per-script state shared by all executors
    - Registry: maps action types to executor classes
    - ScriptExecutor: runs a transition, delegating each action

Usage:
    from wayto.action_executors import ScriptExecutor

    executor = ScriptExecutor(registry)
    result = await executor.execute(transition, session)
"""

# Import executor modules to trigger @register_executor decorator
from . import (
    commands,  # noqa: F401
    control_flow,  # noqa: F401
    data_operations,  # noqa: F401
    navigation,  # noqa: F401
    waits,  # noqa: F401
)
from .base import ActionContext, ActionExecutorBase, ExecutionContext
from .expression_evaluator import ExpressionEvaluator, to_text, truthy
from .registry import (
    create_executor,
    get_executor_class,
    get_registered_action_types,
    register_executor,
)
from .script_executor import ExecutionResult, ScriptExecutor

__all__ = [
    # Main executor
    "ScriptExecutor",
    "ExecutionResult",
    # Base classes
    "ActionContext",
    "ActionExecutorBase",
    "ExecutionContext",
    "ExpressionEvaluator",
    "truthy",
    "to_text",
    # Registry functions
    "register_executor",
    "create_executor",
    "get_executor_class",
    "get_registered_action_types",
]
