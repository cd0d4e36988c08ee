"""Evaluation of script expressions against a live session.

Values follow the scripting language's conventions: ``nil`` is None, only
None and False are falsy, and method calls on nil return nil.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from ..exceptions import ExecutionFailureError
from ..model.expressions import (
    BoolOp,
    Call,
    Compare,
    Concat,
    Expression,
    ExternalVarRef,
    Interpolated,
    Literal,
    MethodCall,
    Not,
    Predicate,
    RegexLiteral,
    VarRef,
)

if TYPE_CHECKING:
    from .base import ExecutionContext

logger = logging.getLogger(__name__)

# Builtins that may be written without parentheses
ZERO_ARGUMENT_FUNCTIONS = frozenset({"get"})

_ANY_LINE = re.compile(".*")


def truthy(value: Any) -> bool:
    """Truthiness as the scripting language defines it: only nil and false are false."""
    return value is not None and value is not False


def to_text(value: Any) -> str:
    """String conversion used for interpolation, ``to_s`` and sends."""
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, re.Match):
        return value.group(0)
    return str(value)


@lru_cache(maxsize=256)
def _compile_regex(literal: RegexLiteral) -> re.Pattern[str]:
    return literal.compile()


def as_pattern(value: Any) -> re.Pattern[str]:
    """Turn a pattern argument into a compiled regex.

    Strings match literally as substrings; compiled patterns pass through.
    """
    if isinstance(value, re.Pattern):
        return value
    if isinstance(value, str):
        return re.compile(re.escape(value))
    raise ExecutionFailureError(f"Not a pattern: {value!r}")


def combine_patterns(patterns: list[re.Pattern[str]]) -> re.Pattern[str]:
    """Combine alternatives into one pattern, keeping each one's flags."""
    if len(patterns) == 1:
        return patterns[0]

    parts = []
    for pattern in patterns:
        flags = ""
        if pattern.flags & re.IGNORECASE:
            flags += "i"
        if pattern.flags & re.DOTALL:
            flags += "s"
        if pattern.flags & re.VERBOSE:
            flags += "x"
        parts.append(f"(?{flags}:{pattern.pattern})" if flags else f"(?:{pattern.pattern})")
    return re.compile("|".join(parts))


class ExpressionEvaluator:
    """Evaluates expression nodes within one execution context."""

    def __init__(self, context: ExecutionContext) -> None:
        self.context = context
        self._handlers = {
            Literal: self._literal,
            Interpolated: self._interpolated,
            RegexLiteral: self._regex,
            VarRef: self._var,
            ExternalVarRef: self._external_var,
            Call: self._call,
            Predicate: self._predicate,
            MethodCall: self._method,
            Compare: self._compare,
            Concat: self._concat,
            BoolOp: self._bool_op,
            Not: self._not,
        }

    async def evaluate(self, expression: Expression) -> Any:
        """Evaluate an expression node.

        Raises:
            ExecutionFailureError: On unknown functions or methods, or type errors
            ScriptExecutionError: From primitives the expression drives
        """
        handler = self._handlers.get(type(expression))
        if handler is None:
            raise ExecutionFailureError(f"Cannot evaluate {type(expression).__name__}")
        return await handler(expression)

    async def evaluate_text(self, expression: Expression) -> str:
        return to_text(await self.evaluate(expression))

    async def evaluate_pattern(self, expression: Expression) -> re.Pattern[str]:
        return as_pattern(await self.evaluate(expression))

    async def _literal(self, expression: Literal) -> Any:
        return expression.value

    async def _interpolated(self, expression: Interpolated) -> str:
        pieces = []
        for part in expression.parts:
            if isinstance(part, str):
                pieces.append(part)
            else:
                pieces.append(to_text(await self.evaluate(part)))
        return "".join(pieces)

    async def _regex(self, expression: RegexLiteral) -> re.Pattern[str]:
        return _compile_regex(expression)

    async def _var(self, expression: VarRef) -> Any:
        variables = self.context.variables
        if expression.name in variables:
            return variables[expression.name]
        if expression.name in ZERO_ARGUMENT_FUNCTIONS:
            return await self._call(Call(expression.name))
        return None

    async def _external_var(self, expression: ExternalVarRef) -> Any:
        return await self.context.primitive("get_external_var", expression.key)

    async def _call(self, expression: Call) -> Any:
        args = [await self.evaluate(arg) for arg in expression.args]
        name = expression.name

        if name == "get":
            return await self.context.primitive("wait_for_pattern", _ANY_LINE, None)

        if name in ("dothistimeout", "dothis"):
            if name == "dothistimeout":
                if len(args) < 3:
                    raise ExecutionFailureError("dothistimeout needs a command, a timeout and a pattern")
                command, timeout, patterns = args[0], _seconds(args[1]), args[2:]
            else:
                if len(args) < 2:
                    raise ExecutionFailureError("dothis needs a command and a pattern")
                command, timeout, patterns = args[0], None, args[1:]
            pattern = combine_patterns([as_pattern(p) for p in patterns])
            await self.context.primitive("send", to_text(command))
            # A timeout yields nil; callers decide whether that matters
            return await self.context.primitive("wait_for_pattern", pattern, timeout)

        if name == "matchtimeout":
            if len(args) < 2:
                raise ExecutionFailureError("matchtimeout needs a timeout and a pattern")
            pattern = combine_patterns([as_pattern(p) for p in args[1:]])
            return await self.context.primitive("wait_for_pattern", pattern, _seconds(args[0]))

        raise ExecutionFailureError(f"Unknown function: {name}")

    async def _predicate(self, expression: Predicate) -> bool:
        name = expression.name.rstrip("?")
        if name == "waitrt":
            if await self.context.primitive("is_action_delay_active"):
                await self.context.primitive("wait_for_action_delay_clear")
            return True
        return bool(await self.context.primitive("has_status", name))

    async def _method(self, expression: MethodCall) -> Any:
        target = await self.evaluate(expression.target)
        args = [await self.evaluate(arg) for arg in expression.args]
        name = expression.name

        if target is None:
            return None

        if name == "match":
            if len(args) != 1:
                raise ExecutionFailureError("match takes exactly one argument")
            if isinstance(target, re.Pattern):
                return None if args[0] is None else target.search(to_text(args[0]))
            if isinstance(target, str):
                return as_pattern(args[0]).search(target)
        elif name == "captures" and isinstance(target, re.Match):
            return list(target.groups())
        elif name == "first" and isinstance(target, (list, str)):
            return target[0] if target else None
        elif name == "last" and isinstance(target, (list, str)):
            return target[-1] if target else None
        elif name == "to_s":
            return to_text(target)
        elif name == "to_i":
            match = re.match(r"\s*-?\d+", to_text(target))
            return int(match.group(0)) if match else 0
        elif name == "strip" and isinstance(target, str):
            return target.strip()
        elif name == "downcase" and isinstance(target, str):
            return target.lower()
        elif name == "upcase" and isinstance(target, str):
            return target.upper()

        raise ExecutionFailureError(
            f"Unsupported method {name!r} on {type(target).__name__}"
        )

    async def _compare(self, expression: Compare) -> Any:
        left = await self.evaluate(expression.left)
        right = await self.evaluate(expression.right)

        if expression.op == "==":
            return left == right
        if expression.op == "!=":
            return left != right

        if isinstance(left, re.Pattern) and not isinstance(right, re.Pattern):
            left, right = right, left
        if left is None:
            match = None
        else:
            match = as_pattern(right).search(to_text(left))
        if expression.op == "=~":
            return match.start() if match else None
        return match is None

    async def _concat(self, expression: Concat) -> Any:
        left = await self.evaluate(expression.left)
        right = await self.evaluate(expression.right)
        if isinstance(left, str) and isinstance(right, str):
            return left + right
        if _is_number(left) and _is_number(right):
            return left + right
        raise ExecutionFailureError(
            f"Cannot add {type(right).__name__} to {type(left).__name__}"
        )

    async def _bool_op(self, expression: BoolOp) -> Any:
        left = await self.evaluate(expression.left)
        if expression.op == "and":
            return await self.evaluate(expression.right) if truthy(left) else left
        return left if truthy(left) else await self.evaluate(expression.right)

    async def _not(self, expression: Not) -> bool:
        return not truthy(await self.evaluate(expression.operand))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _seconds(value: Any) -> float:
    if not _is_number(value):
        raise ExecutionFailureError(f"Expected a number of seconds, got {value!r}")
    return float(value)
