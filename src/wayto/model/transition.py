"""Transitions: what it takes to traverse one edge of the map."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .actions import Action


class TransitionKind(str, Enum):
    DIRECTION = "direction"
    SCRIPT = "script"


class CompassDirection(str, Enum):
    """Movement tokens the game understands without a verb."""

    NORTH = "north"
    NORTHEAST = "northeast"
    EAST = "east"
    SOUTHEAST = "southeast"
    SOUTH = "south"
    SOUTHWEST = "southwest"
    WEST = "west"
    NORTHWEST = "northwest"
    UP = "up"
    DOWN = "down"
    OUT = "out"

    @classmethod
    def from_token(cls, token: str) -> CompassDirection | None:
        """Return the member for ``token`` (full or abbreviated), or None."""
        text = token.strip().lower()
        text = _ABBREVIATIONS.get(text, text)
        try:
            return cls(text)
        except ValueError:
            return None


_ABBREVIATIONS = {
    "n": "north",
    "ne": "northeast",
    "e": "east",
    "se": "southeast",
    "s": "south",
    "sw": "southwest",
    "w": "west",
    "nw": "northwest",
    "u": "up",
    "d": "down",
}


@dataclass(frozen=True)
class Direction:
    """A static movement command, kept verbatim ("northeast", "go ladder")."""

    token: str

    @property
    def kind(self) -> TransitionKind:
        return TransitionKind.DIRECTION

    @property
    def compass(self) -> CompassDirection | None:
        return CompassDirection.from_token(self.token)

    @property
    def is_compass(self) -> bool:
        return self.compass is not None

    @property
    def text(self) -> str:
        """The wayto value exactly as registered."""
        return self.token

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class Script:
    """An executable stringproc.

    Attributes:
        source: Script body with the marker removed
        actions: Parsed, non-empty action sequence
        text: The wayto value exactly as registered, marker included
    """

    source: str
    actions: tuple[Action, ...]
    text: str

    def __post_init__(self) -> None:
        if not self.actions:
            raise ValueError("A script needs at least one action")

    @property
    def kind(self) -> TransitionKind:
        return TransitionKind.SCRIPT

    def action_types(self) -> list[str]:
        """Top-level action types, in order."""
        return [action.action_type for action in self.actions]

    def __str__(self) -> str:
        return self.text


Transition = Direction | Script
