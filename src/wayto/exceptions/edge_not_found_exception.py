"""Edge not found exception.

Exception for lookups of target IDs that no table knows about.
"""

from .wayto_runtime_exception import WaytoRuntimeException


class EdgeNotFoundError(WaytoRuntimeException):
    """Raised when a target node ID is absent from the consulted table(s).

    This is the NotFound signal of a lookup. It always carries the origin
    that was searched (None for the global script pool) and the target ID.
    """

    def __init__(self, target_id: str, origin: str | None = None, context: str | None = None):
        """Construct a new edge not found exception.

        Args:
            target_id: The target node ID that could not be found
            origin: Origin table that was searched
            context: Optional additional context about the lookup
        """
        self.target_id = target_id
        self.origin = origin
        if origin is None:
            message = f"No transition to '{target_id}' in the global script pool"
        else:
            message = f"No transition from '{origin}' to '{target_id}'"
        if context:
            message = f"{message} ({context})"
        super().__init__(message)


class TransitionKindError(WaytoRuntimeException):
    """Raised when a transition is used as the wrong kind.

    For example, asking for the direction token of a script transition.
    """

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected a {expected} transition, got a {actual} transition")
