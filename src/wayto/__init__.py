"""Wayto: edge transition tables for mapdb wayto data.

Loads the per-room ``wayto`` tables of a mapdb export, classifies each
transition as a plain movement direction or a ``;e`` stringproc script,
and executes transitions against a live game session.

Usage:
    from wayto import load_registry_file

    registry = load_registry_file("mapdb.json")
    transition = registry.lookup("28908", "26905")
    result = await registry.executor().execute(transition, session)
"""

from .action_executors import ActionContext, ExecutionResult, ScriptExecutor
from .config import WaytoSettings, get_settings, reset_settings
from .dsl import StringprocParser
from .exceptions import (
    ConfigurationError,
    DuplicateEdgeError,
    EdgeNotFoundError,
    ExecutionFailureError,
    PatternTimeoutError,
    ScriptExecutionError,
    ScriptParseError,
    TransitionKindError,
    WaytoRuntimeException,
)
from .model import CompassDirection, Direction, Room, Script, Transition, TransitionKind
from .table import (
    DataQualityIssue,
    EdgeTransitionTable,
    MapRegistry,
    load_registry,
    load_registry_file,
    parse_room_ranges,
)

__version__ = "0.1.0"

__all__ = [
    # Tables
    "EdgeTransitionTable",
    "MapRegistry",
    "DataQualityIssue",
    "load_registry",
    "load_registry_file",
    "parse_room_ranges",
    # Transitions
    "Transition",
    "TransitionKind",
    "Direction",
    "CompassDirection",
    "Script",
    "Room",
    "StringprocParser",
    # Execution
    "ScriptExecutor",
    "ExecutionResult",
    "ActionContext",
    # Configuration
    "WaytoSettings",
    "get_settings",
    "reset_settings",
    # Exceptions
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
