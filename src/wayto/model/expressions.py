"""Expression nodes for stringproc scripts.

Every node is a frozen dataclass, so two parses of the same text compare
equal and parsed scripts can be shared between sessions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any


class Expression:
    """Marker base class for expression nodes."""

    __slots__ = ()


@dataclass(frozen=True)
class Literal(Expression):
    """A constant: string, number, boolean or nil (None)."""

    value: Any


@dataclass(frozen=True)
class Interpolated(Expression):
    """A double-quoted string with ``#{...}`` segments.

    ``parts`` alternates freely between plain strings and expressions.
    """

    parts: tuple[str | Expression, ...]


@dataclass(frozen=True)
class RegexLiteral(Expression):
    """A ``/.../flags`` regular expression."""

    pattern: str
    flags: str = ""

    def compile(self) -> re.Pattern[str]:
        """Compile to a Python pattern honouring the i, m and x flags."""
        value = 0
        if "i" in self.flags:
            value |= re.IGNORECASE
        if "m" in self.flags:
            # Ruby's /m lets "." cross newlines
            value |= re.DOTALL
        if "x" in self.flags:
            value |= re.VERBOSE
        return re.compile(self.pattern, value)


@dataclass(frozen=True)
class VarRef(Expression):
    """A script-local variable, or a zero-argument built-in such as ``get``."""

    name: str


@dataclass(frozen=True)
class ExternalVarRef(Expression):
    """``UserVars.name``: a read from the session's key/value store."""

    key: str


@dataclass(frozen=True)
class Call(Expression):
    """A built-in function call, e.g. ``dothistimeout(cmd, 25, /re/)``."""

    name: str
    args: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class Predicate(Expression):
    """A status query such as ``hidden?``."""

    name: str


@dataclass(frozen=True)
class MethodCall(Expression):
    """``target.name(args)``, restricted to a fixed set of methods."""

    target: Expression
    name: str
    args: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class Compare(Expression):
    """Binary comparison: ``==``, ``!=``, ``=~`` or ``!~``."""

    op: str
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Concat(Expression):
    """String concatenation or numeric addition with ``+``."""

    left: Expression
    right: Expression


@dataclass(frozen=True)
class BoolOp(Expression):
    """Short-circuit ``and`` / ``or``."""

    op: str
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Not(Expression):
    """Logical negation."""

    operand: Expression
