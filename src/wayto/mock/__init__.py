"""In-memory stand-ins for a live game session."""

from .mock_action_context import MockActionContext

__all__ = ["MockActionContext"]
