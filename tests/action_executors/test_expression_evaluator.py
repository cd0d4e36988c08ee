"""Tests for expression evaluation semantics."""

import re

import pytest

from wayto.action_executors import ExecutionContext, to_text, truthy
from wayto.action_executors.expression_evaluator import as_pattern, combine_patterns
from wayto.config import get_settings
from wayto.dsl import StringprocParser
from wayto.exceptions import ExecutionFailureError
from wayto.mock import MockActionContext


async def _no_actions(actions, context):
    raise AssertionError("expressions never run actions")


def make_context(session, **variables):
    return ExecutionContext(
        action_context=session,
        settings=get_settings(),
        registry=None,
        execute_actions=_no_actions,
        variables=dict(variables),
    )


async def evaluate(text, session=None, **variables):
    expression = StringprocParser().parse_expression(text)
    context = make_context(session or MockActionContext(), **variables)
    return await context.evaluator.evaluate(expression)


class TestValues:
    """Truthiness and text conversion."""

    @pytest.mark.parametrize("value", [0, "", [], "false", 0.0])
    def test_only_nil_and_false_are_falsy(self, value):
        assert truthy(value)

    def test_falsy(self):
        assert not truthy(None)
        assert not truthy(False)

    def test_to_text(self):
        assert to_text(None) == ""
        assert to_text(True) == "true"
        assert to_text(28908) == "28908"
        assert to_text(re.search("b+", "abbc")) == "bb"


class TestOperators:
    """Comparison, concatenation and boolean operators."""

    @pytest.mark.asyncio
    async def test_match_operator_returns_position(self):
        assert await evaluate("'xx inviting you' =~ /inviting you/") == 3
        assert await evaluate("'nothing' =~ /inviting you/") is None

    @pytest.mark.asyncio
    async def test_match_operator_on_nil(self):
        assert await evaluate("nil =~ /x/") is None
        assert await evaluate("nil !~ /x/") is True

    @pytest.mark.asyncio
    async def test_equality(self):
        assert await evaluate("language == 'Guildspeak'", language="Guildspeak") is True
        assert await evaluate("language != 'Guildspeak'", language=None) is True

    @pytest.mark.asyncio
    async def test_concat(self):
        assert await evaluate("'speak ' + lang.to_s", lang="Elven") == "speak Elven"
        assert await evaluate("1 + 2") == 3

    @pytest.mark.asyncio
    async def test_concat_type_error(self):
        with pytest.raises(ExecutionFailureError):
            await evaluate("'a' + 1")

    @pytest.mark.asyncio
    async def test_short_circuit(self):
        # the right side would block forever on an empty session
        assert await evaluate("true or get") is True
        assert await evaluate("nil and get") is None

    @pytest.mark.asyncio
    async def test_not(self):
        assert await evaluate("!nil") is True
        assert await evaluate("not 0") is False


class TestMethods:
    """Methods available on strings, regexes and matches."""

    @pytest.mark.asyncio
    async def test_match_captures_first(self):
        value = await evaluate(
            "/speaking (.*?)\\./.match(line).captures.first", line="You are speaking Elven."
        )
        assert value == "Elven"

    @pytest.mark.asyncio
    async def test_methods_on_nil_return_nil(self):
        assert await evaluate("/x/.match(line).captures.first", line="y") is None

    @pytest.mark.asyncio
    async def test_string_methods(self):
        assert await evaluate("s.strip.downcase", s="  Go Gate ") == "go gate"
        assert await evaluate("s.upcase", s="go") == "GO"
        assert await evaluate("s.to_i", s="42 silvers") == 42

    @pytest.mark.asyncio
    async def test_unknown_method(self):
        with pytest.raises(ExecutionFailureError):
            await evaluate("s.reverse", s="abc")

    @pytest.mark.asyncio
    async def test_match_arity(self):
        with pytest.raises(ExecutionFailureError):
            await evaluate("/x/.match(a, b)", a="x", b="y")


class TestBuiltins:
    """Functions that talk to the session."""

    @pytest.mark.asyncio
    async def test_get_returns_next_line(self):
        session = MockActionContext(incoming=["first", "second"])
        assert await evaluate("get", session) == "first"
        assert session.pending == 1

    @pytest.mark.asyncio
    async def test_dothistimeout_sends_then_waits(self):
        session = MockActionContext(responses={"look": ["noise", "Obvious exits: north"]})
        line = await evaluate("dothistimeout('look', 5, /Obvious/)", session)
        assert line == "Obvious exits: north"
        assert session.sent == ["look"]

    @pytest.mark.asyncio
    async def test_dothistimeout_times_out_to_nil(self, session):
        assert await evaluate("dothistimeout('look', 5, /Obvious/)", session) is None
        assert session.sent == ["look"]

    @pytest.mark.asyncio
    async def test_matchtimeout_waits_without_sending(self):
        session = MockActionContext(incoming=["The ship docks."])
        assert await evaluate("matchtimeout(30, 'docks')", session) == "The ship docks."
        assert session.sent == []

    @pytest.mark.asyncio
    async def test_status_predicates(self):
        session = MockActionContext(statuses=["stunned"])
        assert await evaluate("stunned?", session) is True
        assert await evaluate("webbed?", session) is False

    @pytest.mark.asyncio
    async def test_unknown_function(self):
        with pytest.raises(ExecutionFailureError, match="Unknown function"):
            await evaluate("teleport(1)")

    @pytest.mark.asyncio
    async def test_interpolation(self):
        assert await evaluate('"go #{table} table"', table="ghost") == "go ghost table"


class TestPatterns:
    """Pattern helpers."""

    def test_string_patterns_are_literal(self):
        assert as_pattern("a.b").search("a.b")
        assert not as_pattern("a.b").search("axb")

    def test_combine_keeps_flags(self):
        pattern = combine_patterns([re.compile("north", re.IGNORECASE), re.compile("south")])
        assert pattern.search("NORTH")
        assert not pattern.search("SOUTH")

    def test_non_pattern_rejected(self):
        with pytest.raises(ExecutionFailureError):
            as_pattern(5)
