"""Exceptions package.

Wayto-specific exceptions.
"""

from .configuration_exception import ConfigurationError, DuplicateEdgeError, ScriptParseError
from .edge_not_found_exception import EdgeNotFoundError, TransitionKindError
from .script_execution_exception import (
    ExecutionFailureError,
    PatternTimeoutError,
    ScriptExecutionError,
)
from .wayto_runtime_exception import WaytoRuntimeException

__all__ = [
    "WaytoRuntimeException",
    "EdgeNotFoundError",
    "TransitionKindError",
    "ScriptExecutionError",
    "PatternTimeoutError",
    "ExecutionFailureError",
    "ConfigurationError",
    "ScriptParseError",
    "DuplicateEdgeError",
]
