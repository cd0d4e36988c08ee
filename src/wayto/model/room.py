"""Room records as stored in a mapdb export."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Room(BaseModel):
    """One room of the map with its outgoing edges.

    ``timeto`` holds the travel cost of each edge in seconds. A ``None`` cost
    marks an edge the pathing engine should not use; a string holds a
    dynamic cost script that this package keeps as text.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    title: list[str] = Field(default_factory=list)
    description: list[str] = Field(default_factory=list)
    location: str | None = None
    uid: list[int] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    wayto: dict[str, str] = Field(default_factory=dict)
    timeto: dict[str, float | str | None] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> str:
        return str(value)

    @field_validator("title", "description", mode="before")
    @classmethod
    def _text_list(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return list(value)

    @field_validator("wayto", "timeto", mode="before")
    @classmethod
    def _string_keys(cls, value: Any) -> dict[str, Any]:
        if value is None:
            return {}
        return {str(key): item for key, item in dict(value).items()}

    @property
    def name(self) -> str:
        """First title, or the ID when the room has none."""
        return self.title[0] if self.title else self.id
