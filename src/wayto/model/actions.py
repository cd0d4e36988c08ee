"""Script actions.

A parsed script is a tuple of these frozen dataclasses. The set is closed:
the executor registry has exactly one executor per ``action_type``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .expressions import Expression


class Action:
    """Base class for script actions."""

    __slots__ = ()

    action_type: ClassVar[str] = "ACTION"


@dataclass(frozen=True)
class Noop(Action):
    """Does nothing and always succeeds (``;e true``)."""

    action_type: ClassVar[str] = "NOOP"


@dataclass(frozen=True)
class Send(Action):
    """Emit one line to the session.

    ``move`` marks movement commands so logs and dry runs can tell them apart.
    """

    action_type: ClassVar[str] = "SEND"

    command: Expression
    move: bool = False


@dataclass(frozen=True)
class MultiSend(Action):
    """Emit a fixed ordered list of lines."""

    action_type: ClassVar[str] = "MULTI_SEND"

    commands: tuple[Expression, ...]


@dataclass(frozen=True)
class WaitForPattern(Action):
    """Block until incoming text matches any of ``patterns``.

    String patterns match as substrings, regex literals as searches. With no
    timeout the wait is unbounded.
    """

    action_type: ClassVar[str] = "WAIT_FOR_PATTERN"

    patterns: tuple[Expression, ...]
    timeout: float | None = None


@dataclass(frozen=True)
class WaitRoundtime(Action):
    """Block until the session's action delay has cleared."""

    action_type: ClassVar[str] = "WAIT_ROUNDTIME"


@dataclass(frozen=True)
class Sleep(Action):
    action_type: ClassVar[str] = "SLEEP"

    seconds: Expression


@dataclass(frozen=True)
class Conditional(Action):
    """Run ``body`` when ``condition`` is truthy (falsy when ``negate``)."""

    action_type: ClassVar[str] = "CONDITIONAL"

    condition: Expression
    body: tuple[Action, ...]
    negate: bool = False


@dataclass(frozen=True)
class Loop(Action):
    """``while`` / ``until`` loop; the condition is checked before each pass."""

    action_type: ClassVar[str] = "LOOP"

    condition: Expression
    body: tuple[Action, ...]
    until: bool = False


@dataclass(frozen=True)
class Repeat(Action):
    """``N.times{ ... }``."""

    action_type: ClassVar[str] = "REPEAT"

    count: int
    body: tuple[Action, ...]


@dataclass(frozen=True)
class CrossCall(Action):
    """Run another origin's transition: ``Map[7].wayto['3668'].call``."""

    action_type: ClassVar[str] = "CROSS_CALL"

    map_id: str
    target_id: str


@dataclass(frozen=True)
class SetExternalVar(Action):
    """``UserVars.key = value``, written through the action context."""

    action_type: ClassVar[str] = "SET_EXTERNAL_VAR"

    key: str
    value: Expression


@dataclass(frozen=True)
class Assign(Action):
    """Script-local assignment."""

    action_type: ClassVar[str] = "ASSIGN"

    name: str
    value: Expression


@dataclass(frozen=True)
class Evaluate(Action):
    """Evaluate an expression for its side effects and discard the value."""

    action_type: ClassVar[str] = "EVALUATE"

    expression: Expression
