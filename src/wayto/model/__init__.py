"""Data model: transitions, script actions, expressions and room records."""

from .actions import (
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
from .expressions import (
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
from .room import Room
from .transition import CompassDirection, Direction, Script, Transition, TransitionKind

__all__ = [
    # Transitions
    "Transition",
    "TransitionKind",
    "Direction",
    "CompassDirection",
    "Script",
    "Room",
    # Actions
    "Action",
    "Noop",
    "Send",
    "MultiSend",
    "WaitForPattern",
    "WaitRoundtime",
    "Sleep",
    "Conditional",
    "Loop",
    "Repeat",
    "CrossCall",
    "SetExternalVar",
    "Assign",
    "Evaluate",
    # Expressions
    "Expression",
    "Literal",
    "Interpolated",
    "RegexLiteral",
    "VarRef",
    "ExternalVarRef",
    "Call",
    "Predicate",
    "MethodCall",
    "Compare",
    "Concat",
    "BoolOp",
    "Not",
]
