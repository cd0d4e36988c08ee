"""Tests for the stringproc parser."""

import re

import pytest

from conftest import (
    DUSKRUIN_SCRIPT,
    GO_TABLE_SCRIPT,
    PORTMASTER_SCRIPT,
    ROGUE_GUILD_SCRIPT,
    WIZARD_GUILD_SCRIPT,
)
from wayto.dsl import StringprocParser
from wayto.exceptions import ScriptParseError
from wayto.model import (
    Assign,
    Call,
    Compare,
    Conditional,
    CrossCall,
    Direction,
    Interpolated,
    Literal,
    Loop,
    MultiSend,
    Noop,
    Predicate,
    RegexLiteral,
    Repeat,
    Script,
    Send,
    SetExternalVar,
    Sleep,
    VarRef,
    WaitForPattern,
    WaitRoundtime,
)


@pytest.fixture
def parser():
    return StringprocParser()


class TestClassification:
    """Direction vs script classification."""

    def test_plain_text_is_direction(self, parser):
        assert parser.parse_transition("northeast") == Direction("northeast")

    def test_non_compass_direction_kept_verbatim(self, parser):
        transition = parser.parse_transition("go ladder")
        assert transition == Direction("go ladder")
        assert not transition.is_compass

    def test_marker_must_be_a_prefix(self, parser):
        assert parser.parse_transition("say ;e hello") == Direction("say ;e hello")

    def test_true_script_is_single_noop(self, parser):
        transition = parser.parse_transition(";e true")
        assert isinstance(transition, Script)
        assert transition.actions == (Noop(),)
        assert transition.source == "true"

    def test_custom_marker(self):
        parser = StringprocParser(marker=";x")
        assert isinstance(parser.parse_transition(";x true"), Script)
        assert parser.parse_transition(";e true") == Direction(";e true")


class TestStatements:
    """Each statement kind of the real wayto scripts."""

    def test_multifput_then_waitfor(self, parser):
        script = parser.parse_transition(PORTMASTER_SCRIPT)
        assert script.actions == (
            MultiSend(
                (
                    Literal("ask portmaster about travel 2"),
                    Literal("ask portmaster about travel 2"),
                )
            ),
            WaitForPattern((Literal("A crew member escorts you off the ship."),)),
        )

    def test_repeat_block_and_external_var(self, parser):
        script = parser.parse_transition(DUSKRUIN_SCRIPT)
        assert script.actions == (
            Repeat(2, (Send(Literal("quest transport duskruin")),)),
            SetExternalVar("mapdb_duskruin_origin", Literal(28908)),
        )

    def test_cross_call(self, parser):
        script = parser.parse_transition(";e Map[7].wayto['3668'].call;")
        assert script.actions == (CrossCall("7", "3668"),)

    def test_guarded_fput(self, parser):
        assign, guarded = parser.parse_transition(GO_TABLE_SCRIPT).actions

        assert assign == Assign("table", Literal("ghost"))
        assert isinstance(guarded, Conditional)
        assert not guarded.negate
        command = Interpolated(("go ", VarRef("table"), " table"))
        assert guarded.body == (Send(command),)

        condition = guarded.condition
        assert isinstance(condition, Compare)
        assert condition.op == "=~"
        assert condition.right == RegexLiteral("inviting you|invites you", "")
        guard_call = condition.left
        assert isinstance(guard_call, Call)
        assert guard_call.name == "dothistimeout"
        assert guard_call.args[0] == command
        assert guard_call.args[1] == Literal(25)

    def test_sleep_and_roundtime(self, parser):
        actions = parser.parse_transition(ROGUE_GUILD_SCRIPT).actions
        assert [a.action_type for a in actions] == [
            "SEND",
            "SLEEP",
            "SEND",
            "WAIT_ROUNDTIME",
            "SEND",
            "WAIT_ROUNDTIME",
            "SEND",
            "WAIT_ROUNDTIME",
            "SEND",
        ]
        assert actions[1] == Sleep(Literal(0.5))
        assert actions[-1] == Send(Literal("go panel"), move=True)

    def test_move_then_waitrt(self, parser):
        actions = parser.parse_transition(";e move 'northeast'; waitrt?").actions
        assert actions == (Send(Literal("northeast"), move=True), WaitRoundtime())

    def test_until_and_unless_modifiers(self, parser):
        actions = parser.parse_transition(WIZARD_GUILD_SCRIPT).actions
        assert [a.action_type for a in actions] == [
            "SEND",
            "LOOP",
            "CONDITIONAL",
            "CONDITIONAL",
            "SEND",
            "CONDITIONAL",
        ]

        loop = actions[1]
        assert isinstance(loop, Loop)
        assert loop.until
        assert loop.condition == VarRef("language")
        assert isinstance(loop.body[0], Assign)

        assert actions[2].negate
        unhide = actions[3]
        assert not unhide.negate
        assert unhide.condition.left == Predicate("hidden?")
        assert unhide.condition.right == Predicate("invisible?")

    def test_parenthesised_arguments(self, parser):
        actions = parser.parse_transition(";e multifput('search', 'go passage')").actions
        assert actions == (MultiSend((Literal("search"), Literal("go passage"))),)

    def test_comment_and_newlines(self, parser):
        actions = parser.parse_transition(";e fput 'search' # look around\nmove 'climb stair'").actions
        assert actions == (Send(Literal("search")), Send(Literal("climb stair"), move=True))

    def test_double_quote_escapes(self, parser):
        actions = parser.parse_transition(';e fput "say \\"hi\\""').actions
        assert actions == (Send(Literal('say "hi"')),)

    def test_quoted_brace_inside_interpolation(self, parser):
        actions = parser.parse_transition(";e fput \"#{'}'}\"").actions
        assert actions == (Send(Interpolated((Literal("}"),))),)

    def test_ruby_named_group_is_translated(self, parser):
        (wait,) = parser.parse_transition(";e waitforre /(?<who>\\w+) waves/").actions
        pattern = wait.patterns[0].compile()
        assert pattern.search("Bob waves").group("who") == "Bob"

    def test_regex_flags(self, parser):
        (wait,) = parser.parse_transition(";e waitfor /ready/i").actions
        assert wait.patterns[0].compile().flags & re.IGNORECASE


class TestDeterminism:
    """Parsing is pure: the same text always yields the same tree."""

    @pytest.mark.parametrize(
        "text",
        [GO_TABLE_SCRIPT, PORTMASTER_SCRIPT, DUSKRUIN_SCRIPT, WIZARD_GUILD_SCRIPT, ROGUE_GUILD_SCRIPT],
    )
    def test_parse_twice_equal(self, parser, text):
        first = parser.parse_transition(text)
        second = StringprocParser().parse_transition(text)
        assert first == second
        assert first.actions


class TestErrors:
    """Scripts that must be rejected at load time."""

    @pytest.mark.parametrize(
        "text",
        [
            ";e",
            ";e   ",
            ";e fput 'unterminated",
            ";e fput 'a', 'b'",
            ";e waitfor /[unclosed/",
            ";e Map[7].wayto.call",
            ";e ('a', 'b')",
            ';e fput "#{x"',
            ";e fput \"#{'}\"",
        ],
    )
    def test_invalid_script_raises(self, parser, text):
        with pytest.raises(ScriptParseError):
            parser.parse_transition(text, origin="1", target_id="2")

    def test_error_carries_location(self, parser):
        with pytest.raises(ScriptParseError) as exc_info:
            parser.parse_transition(";e fput 'oops", origin="29033", target_id="19213")
        assert exc_info.value.origin == "29033"
        assert exc_info.value.target_id == "19213"
        assert "29033 -> 19213" in str(exc_info.value)

    def test_validate(self, parser):
        assert parser.validate("north")
        assert parser.validate(PORTMASTER_SCRIPT)
        assert not parser.validate(";e fput 'oops")
