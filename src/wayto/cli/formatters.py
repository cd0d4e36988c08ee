"""Output formatters for the CLI.

Provides two formats for transitions and registries:
- text: Human-readable, with scripts shown as an action tree
- json: Machine-readable
"""

import json
from typing import Any

from ..action_executors import ExecutionResult
from ..model.actions import (
    Action,
    Assign,
    Conditional,
    CrossCall,
    Evaluate,
    Loop,
    MultiSend,
    Repeat,
    Send,
    SetExternalVar,
    Sleep,
    WaitForPattern,
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
from ..model.transition import Direction, Transition
from ..table import DataQualityIssue, EdgeTransitionTable, MapRegistry

FORMATS = ("text", "json")


def render_expression(expression: Expression) -> str:
    """Render an expression back to script-like text."""
    if isinstance(expression, Literal):
        if expression.value is None:
            return "nil"
        if isinstance(expression.value, bool):
            return "true" if expression.value else "false"
        if isinstance(expression.value, str):
            return repr(expression.value)
        return str(expression.value)
    if isinstance(expression, Interpolated):
        parts = [
            part if isinstance(part, str) else "#{" + render_expression(part) + "}"
            for part in expression.parts
        ]
        return '"' + "".join(parts) + '"'
    if isinstance(expression, RegexLiteral):
        return f"/{expression.pattern}/{expression.flags}"
    if isinstance(expression, VarRef):
        return expression.name
    if isinstance(expression, ExternalVarRef):
        return f"UserVars.{expression.key}"
    if isinstance(expression, Call):
        return f"{expression.name}({_args(expression.args)})"
    if isinstance(expression, Predicate):
        return expression.name
    if isinstance(expression, MethodCall):
        suffix = f"({_args(expression.args)})" if expression.args else ""
        return f"{render_expression(expression.target)}.{expression.name}{suffix}"
    if isinstance(expression, Compare):
        return f"{render_expression(expression.left)} {expression.op} {render_expression(expression.right)}"
    if isinstance(expression, Concat):
        return f"{render_expression(expression.left)} + {render_expression(expression.right)}"
    if isinstance(expression, BoolOp):
        return f"({render_expression(expression.left)} {expression.op} {render_expression(expression.right)})"
    if isinstance(expression, Not):
        return f"!{render_expression(expression.operand)}"
    return type(expression).__name__


def _args(args: tuple[Expression, ...]) -> str:
    return ", ".join(render_expression(arg) for arg in args)


def format_actions(actions: tuple[Action, ...], indent: int = 0) -> list[str]:
    """Render an action sequence as indented lines, one per action."""
    pad = "  " * indent
    lines = []
    for action in actions:
        detail = ""
        body: tuple[Action, ...] = ()
        if isinstance(action, Send):
            detail = ("move " if action.move else "") + render_expression(action.command)
        elif isinstance(action, MultiSend):
            detail = _args(action.commands)
        elif isinstance(action, WaitForPattern):
            detail = _args(action.patterns)
            if action.timeout is not None:
                detail += f" (timeout {action.timeout}s)"
        elif isinstance(action, Sleep):
            detail = render_expression(action.seconds)
        elif isinstance(action, Conditional):
            detail = ("unless " if action.negate else "if ") + render_expression(action.condition)
            body = action.body
        elif isinstance(action, Loop):
            detail = ("until " if action.until else "while ") + render_expression(action.condition)
            body = action.body
        elif isinstance(action, Repeat):
            detail = f"{action.count} times"
            body = action.body
        elif isinstance(action, CrossCall):
            detail = f"Map[{action.map_id}].wayto[{action.target_id!r}]"
        elif isinstance(action, SetExternalVar):
            detail = f"UserVars.{action.key} = {render_expression(action.value)}"
        elif isinstance(action, Assign):
            detail = f"{action.name} = {render_expression(action.value)}"
        elif isinstance(action, Evaluate):
            detail = render_expression(action.expression)

        lines.append(f"{pad}{action.action_type}" + (f" {detail}" if detail else ""))
        lines.extend(format_actions(body, indent + 1))
    return lines


def transition_to_dict(target_id: str, transition: Transition) -> dict[str, Any]:
    if isinstance(transition, Direction):
        return {
            "target": target_id,
            "kind": transition.kind.value,
            "token": transition.token,
            "compass": transition.compass.value if transition.compass else None,
        }
    return {
        "target": target_id,
        "kind": transition.kind.value,
        "text": transition.text,
        "source": transition.source,
        "actions": list(transition.action_types()),
    }


def format_transition(target_id: str, transition: Transition, format_type: str = "text") -> str:
    """Format one transition.

    Raises:
        ValueError: If format_type is not recognized
    """
    if format_type == "json":
        return json.dumps(transition_to_dict(target_id, transition), indent=2)
    if format_type != "text":
        raise ValueError(f"Unknown format type: {format_type}")

    if isinstance(transition, Direction):
        return f"{target_id}: direction {transition.token!r}"
    lines = [f"{target_id}: script {transition.source!r}"]
    lines.extend(format_actions(transition.actions, indent=1))
    return "\n".join(lines)


def format_table(table: EdgeTransitionTable, format_type: str = "text") -> str:
    """Format every edge of one origin."""
    if format_type == "json":
        return json.dumps(
            {
                "origin": table.origin,
                "title": table.room.name if table.room else None,
                "edges": [transition_to_dict(k, v) for k, v in table.items()],
            },
            indent=2,
        )
    if format_type != "text":
        raise ValueError(f"Unknown format type: {format_type}")

    header = f"Origin {table.origin}"
    if table.room is not None:
        header += f" - {table.room.name}"
    lines = [f"{header} ({len(table)} edges)"]
    for target_id, transition in table.items():
        if isinstance(transition, Direction):
            lines.append(f"  -> {target_id}: {transition.token}")
        else:
            lines.append(f"  -> {target_id}: {transition.text}")
    return "\n".join(lines)


def format_issues(issues: tuple[DataQualityIssue, ...]) -> str:
    return "\n".join(
        f"  [{issue.kind}] {issue.origin or '<global>'}"
        + (f" -> {issue.target_id}" if issue.target_id else "")
        + f": {issue.detail}"
        for issue in issues
    )


def format_summary(registry: MapRegistry) -> str:
    """Counts of origins, edges and transition kinds."""
    directions = sum(len(t.directions()) for t in registry.tables())
    scripts = sum(len(t.scripts()) for t in registry.tables())
    lines = [
        f"Origins: {len(registry)}",
        f"Edges: {directions + scripts} ({directions} directions, {scripts} scripts)",
        f"Global scripts: {len(registry.global_pool)}",
    ]
    locations = registry.locations()
    if locations:
        lines.append(f"Locations: {len(locations)}")
    lines.append(f"Data quality issues: {len(registry.issues)}")
    return "\n".join(lines)


def format_result(result: ExecutionResult, sent: list[str]) -> str:
    """Format a dry run: the lines sent and the outcome."""
    lines = [f"> {line}" for line in sent]
    if result.success:
        lines.append(f"OK ({result.duration:.3f}s)")
    else:
        lines.append(f"FAILED at {result.failed_action_type}: {result.error}")
    return "\n".join(lines)
