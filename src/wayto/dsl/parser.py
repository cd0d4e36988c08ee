"""Parser for stringproc transition scripts.

A wayto entry whose text starts with the script marker (``;e``) holds a
short script in the game client's macro language, for example::

    ;e multifput 'ask portmaster about travel 2','ask portmaster about travel 2';waitfor 'A crew member escorts you off the ship.'

The script is parsed once, at load time, into a tuple of frozen action
dataclasses (see ``wayto.model.actions``). Nothing is ever evaluated as
host-language code.
"""

import logging
import re
from functools import lru_cache
from typing import Any

from lark import Lark, Token, Transformer
from lark.exceptions import LarkError, VisitError

from ..exceptions import ScriptParseError
from ..model.actions import (
    Action,
    Assign,
    Conditional,
    CrossCall,
    Evaluate,
    Loop,
    MultiSend,
    Noop,
    Repeat,
    Send,
    SetExternalVar,
    Sleep,
    WaitForPattern,
    WaitRoundtime,
)
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
from ..model.transition import Direction, Script, Transition

logger = logging.getLogger(__name__)

DEFAULT_SCRIPT_MARKER = ";e"

STRINGPROC_GRAMMAR = r"""
    script: _body

    _body: (_SEP | statement _SEP)* statement?

    block: "{" _body "}"
         | "do" _body "end"

    statement: simple_statement modifier*

    ?simple_statement: "fput" _arguments                 -> send
                     | "put" _arguments                  -> send
                     | "move" _arguments                 -> move
                     | "multifput" _arguments            -> multi_send
                     | "waitfor" _arguments              -> wait_for
                     | "waitforre" _arguments            -> wait_for
                     | "sleep" _arguments                -> sleep
                     | "Map" "[" _key "]" "." "wayto" "[" _key "]" "." "call" -> cross_call
                     | "UserVars" "." NAME "=" expr      -> set_external_var
                     | NAME "=" expr                     -> assign
                     | TIMES block                       -> repeat
                     | expr                              -> evaluate

    modifier: "if" expr         -> if_modifier
            | "unless" expr     -> unless_modifier
            | "while" expr      -> while_modifier
            | "until" expr      -> until_modifier

    _arguments: expr ("," expr)*
    _key: NUMBER | SQ_STRING | DQ_STRING

    ?expr: or_test

    ?or_test: and_test
            | or_test ("or" | "||") and_test        -> or_op

    ?and_test: not_test
             | and_test ("and" | "&&") not_test     -> and_op

    ?not_test: comparison
             | ("not" | "!") not_test               -> not_op

    ?comparison: sum
               | sum COMP_OP sum                    -> compare

    ?sum: postfix
        | sum "+" postfix                           -> concat

    ?postfix: atom
            | postfix "." NAME                      -> method
            | postfix "." NAME "(" _arguments? ")"  -> method

    ?atom: NUMBER                                   -> number
         | SQ_STRING                                -> sq_string
         | DQ_STRING                                -> dq_string
         | REGEX                                    -> regex
         | "true"                                   -> true
         | "false"                                  -> false
         | "nil"                                    -> nil
         | NAME                                     -> var
         | NAME "(" _arguments? ")"                 -> call
         | PRED_NAME                                -> predicate
         | "UserVars" "." NAME                      -> external_var
         | "(" expr ")"
         | "(" expr ("," expr)+ ")"                 -> arg_tuple

    TIMES.2: /\d+\.times\b/
    PRED_NAME.2: /[a-z_][a-zA-Z0-9_]*\?/
    NAME: /[a-z_][a-zA-Z0-9_]*/
    NUMBER: /\d+(\.\d+)?/
    SQ_STRING: /'(?:\\.|[^'\\])*'/
    DQ_STRING: /"(?:\\.|[^"\\])*"/
    REGEX: /\/(?:\\.|[^\/\\\n])+\/[imx]*/
    COMP_OP: "==" | "!=" | "=~" | "!~"

    _SEP: /[;\n]/
    COMMENT: /#[^\n]*/

    %ignore /[ \t\f\r]+/
    %ignore COMMENT
"""

_DQ_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "e": "\x1b", "0": "\0", "s": " "}

# Ruby named groups use (?<name>...); Python wants (?P<name>...)
_RUBY_NAMED_GROUP = re.compile(r"\(\?<(?![=!])")


@lru_cache(maxsize=1)
def _build_lark() -> Lark:
    return Lark(STRINGPROC_GRAMMAR, parser="lalr", start=["script", "expr"])


class _Tuple(tuple):
    """Parenthesised argument list, e.g. the ``('a', 'b')`` in ``multifput('a', 'b')``."""


class StringprocTransformer(Transformer[Token, Any]):
    """Transform a stringproc parse tree into action and expression nodes."""

    def __init__(self, parse_expression) -> None:
        """Initialize the transformer.

        Args:
            parse_expression: Callback used to parse ``#{...}`` segments
        """
        super().__init__()
        self._parse_expression = parse_expression

    # Statements

    def script(self, items: list[Any]) -> tuple[Action, ...]:
        return tuple(items)

    def block(self, items: list[Any]) -> tuple[Action, ...]:
        return tuple(items)

    def statement(self, items: list[Any]) -> Action:
        """Wrap the statement in its trailing modifiers, innermost first.

        ``a if b while c`` runs ``(a if b)`` while ``c`` holds.
        """
        action = items[0]
        for kind, condition in items[1:]:
            if kind == "if":
                action = Conditional(condition, (action,))
            elif kind == "unless":
                action = Conditional(condition, (action,), negate=True)
            elif kind == "while":
                action = Loop(condition, (action,))
            else:
                action = Loop(condition, (action,), until=True)
        return action

    def if_modifier(self, items: list[Any]) -> tuple[str, Expression]:
        return ("if", items[0])

    def unless_modifier(self, items: list[Any]) -> tuple[str, Expression]:
        return ("unless", items[0])

    def while_modifier(self, items: list[Any]) -> tuple[str, Expression]:
        return ("while", items[0])

    def until_modifier(self, items: list[Any]) -> tuple[str, Expression]:
        return ("until", items[0])

    def send(self, items: list[Any]) -> Send:
        args = _flatten(items)
        if len(args) != 1:
            raise ValueError(f"fput takes exactly one command, got {len(args)}")
        return Send(args[0])

    def move(self, items: list[Any]) -> Send:
        args = _flatten(items)
        if len(args) != 1:
            raise ValueError(f"move takes exactly one command, got {len(args)}")
        return Send(args[0], move=True)

    def multi_send(self, items: list[Any]) -> MultiSend:
        return MultiSend(tuple(_flatten(items)))

    def wait_for(self, items: list[Any]) -> WaitForPattern:
        return WaitForPattern(tuple(_flatten(items)))

    def sleep(self, items: list[Any]) -> Sleep:
        args = _flatten(items)
        if len(args) != 1:
            raise ValueError("sleep takes exactly one duration")
        return Sleep(args[0])

    def cross_call(self, items: list[Any]) -> CrossCall:
        map_id, target_id = (_key_text(token) for token in items)
        return CrossCall(map_id, target_id)

    def set_external_var(self, items: list[Any]) -> SetExternalVar:
        return SetExternalVar(str(items[0]), items[1])

    def assign(self, items: list[Any]) -> Assign:
        return Assign(str(items[0]), items[1])

    def repeat(self, items: list[Any]) -> Repeat:
        count = int(str(items[0]).split(".", 1)[0])
        return Repeat(count, items[1])

    def evaluate(self, items: list[Any]) -> Action:
        expression = items[0]
        if isinstance(expression, _Tuple):
            raise ValueError("A parenthesised list is not a statement")
        if isinstance(expression, Literal):
            return Noop()
        if isinstance(expression, Predicate) and expression.name == "waitrt?":
            return WaitRoundtime()
        return Evaluate(expression)

    # Expressions

    def or_op(self, items: list[Any]) -> BoolOp:
        return BoolOp("or", items[0], items[1])

    def and_op(self, items: list[Any]) -> BoolOp:
        return BoolOp("and", items[0], items[1])

    def not_op(self, items: list[Any]) -> Not:
        return Not(items[0])

    def compare(self, items: list[Any]) -> Compare:
        return Compare(str(items[1]), items[0], items[2])

    def concat(self, items: list[Any]) -> Concat:
        return Concat(items[0], items[1])

    def method(self, items: list[Any]) -> MethodCall:
        return MethodCall(items[0], str(items[1]), tuple(_flatten(items[2:])))

    def number(self, items: list[Any]) -> Literal:
        return Literal(_number(str(items[0])))

    def sq_string(self, items: list[Any]) -> Literal:
        return Literal(_unescape_single(str(items[0])[1:-1]))

    def dq_string(self, items: list[Any]) -> Expression:
        parts = self._interpolate(str(items[0])[1:-1])
        if all(isinstance(part, str) for part in parts):
            return Literal("".join(parts))  # type: ignore[arg-type]
        return Interpolated(tuple(parts))

    def regex(self, items: list[Any]) -> RegexLiteral:
        text = str(items[0])
        end = text.rindex("/")
        pattern = _RUBY_NAMED_GROUP.sub("(?P<", text[1:end].replace("\\/", "/"))
        literal = RegexLiteral(pattern, text[end + 1 :])
        literal.compile()
        return literal

    def true(self, items: list[Any]) -> Literal:
        return Literal(True)

    def false(self, items: list[Any]) -> Literal:
        return Literal(False)

    def nil(self, items: list[Any]) -> Literal:
        return Literal(None)

    def var(self, items: list[Any]) -> VarRef:
        return VarRef(str(items[0]))

    def call(self, items: list[Any]) -> Call:
        return Call(str(items[0]), tuple(_flatten(items[1:])))

    def predicate(self, items: list[Any]) -> Predicate:
        return Predicate(str(items[0]))

    def external_var(self, items: list[Any]) -> ExternalVarRef:
        return ExternalVarRef(str(items[0]))

    def arg_tuple(self, items: list[Any]) -> _Tuple:
        return _Tuple(items)

    def _interpolate(self, body: str) -> list[str | Expression]:
        parts: list[str | Expression] = []
        buffer: list[str] = []
        i = 0
        while i < len(body):
            char = body[i]
            if char == "\\" and i + 1 < len(body):
                buffer.append(_DQ_ESCAPES.get(body[i + 1], body[i + 1]))
                i += 2
                continue
            if char == "#" and body.startswith("{", i + 1):
                end = _matching_brace(body, i + 1)
                if buffer:
                    parts.append("".join(buffer))
                    buffer = []
                parts.append(self._parse_expression(body[i + 2 : end]))
                i = end + 1
                continue
            buffer.append(char)
            i += 1
        if buffer or not parts:
            parts.append("".join(buffer))
        return parts


def _flatten(items: list[Any]) -> list[Expression]:
    """Spread a single parenthesised argument list into plain arguments."""
    if len(items) == 1 and isinstance(items[0], _Tuple):
        return list(items[0])
    return [item for item in items if item is not None]


def _number(text: str) -> int | float:
    return float(text) if "." in text else int(text)


def _key_text(token: Token) -> str:
    text = str(token)
    if token.type in ("SQ_STRING", "DQ_STRING"):
        return text[1:-1]
    return text


def _unescape_single(body: str) -> str:
    return re.sub(r"\\([\\'])", r"\1", body)


def _matching_brace(text: str, start: int) -> int:
    """Index of the brace closing the one at ``start``; quoted braces do not count."""
    depth = 0
    index = start
    while index < len(text):
        char = text[index]
        if char in "'\"":
            index = _closing_quote(text, index)
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    raise ValueError(f"Unterminated interpolation in {text!r}")


def _closing_quote(text: str, start: int) -> int:
    quote = text[start]
    index = start + 1
    while index < len(text):
        if text[index] == "\\":
            index += 2
            continue
        if text[index] == quote:
            return index
        index += 1
    raise ValueError(f"Unterminated string in interpolation {text!r}")


class StringprocParser:
    """Parser for wayto transition text.

    Example:
        >>> parser = StringprocParser()
        >>> parser.parse_transition("northeast")
        Direction(token='northeast')
        >>> parser.parse_transition(";e true").actions
        (Noop(),)
    """

    def __init__(self, marker: str = DEFAULT_SCRIPT_MARKER) -> None:
        """Initialize the parser.

        Args:
            marker: Prefix that marks transition text as a script
        """
        self.marker = marker
        self.parser: Lark = _build_lark()

    def is_script(self, text: str) -> bool:
        """Whether the transition text starts with the script marker."""
        return text.startswith(self.marker)

    def parse_transition(
        self, text: str, origin: str | None = None, target_id: str | None = None
    ) -> Transition:
        """Classify transition text and parse it when it is a script.

        Args:
            text: Raw wayto value
            origin: Origin table, used in error messages
            target_id: Target ID, used in error messages

        Returns:
            Direction with the verbatim text, or a parsed Script

        Raises:
            ScriptParseError: If the script body does not parse
        """
        if not self.is_script(text):
            return Direction(text)

        body = text[len(self.marker) :].strip()
        return Script(body, self.parse_script(body, origin=origin, target_id=target_id), text)

    def parse_script(
        self, body: str, origin: str | None = None, target_id: str | None = None
    ) -> tuple[Action, ...]:
        """Parse a script body (marker already removed) into actions.

        Raises:
            ScriptParseError: If the body is empty or does not parse
        """
        try:
            tree = self.parser.parse(body, start="script")
            actions = StringprocTransformer(self.parse_expression).transform(tree)
        except VisitError as e:
            logger.debug(f"Script transform failed: {e.orig_exc}")
            cause = e.orig_exc if isinstance(e.orig_exc, Exception) else e
            raise ScriptParseError(body, cause, origin=origin, target_id=target_id) from e
        except LarkError as e:
            logger.debug(f"Script syntax error: {e}")
            raise ScriptParseError(body, e, origin=origin, target_id=target_id) from e

        if not actions:
            raise ScriptParseError(
                body, ValueError("script has no statements"), origin=origin, target_id=target_id
            )
        return tuple(actions)

    def parse_expression(self, text: str) -> Expression:
        """Parse a standalone expression, e.g. the inside of ``#{...}``."""
        tree = self.parser.parse(text, start="expr")
        result = StringprocTransformer(self.parse_expression).transform(tree)
        if isinstance(result, _Tuple):
            raise ValueError(f"Not a single expression: {text!r}")
        return result

    def validate(self, text: str) -> bool:
        """Check that transition text is a direction or a parsable script."""
        try:
            self.parse_transition(text)
            return True
        except ScriptParseError:
            return False
