"""Script execution exceptions.

Exceptions thrown while interpreting a transition script.
"""

from .wayto_runtime_exception import WaytoRuntimeException


class ScriptExecutionError(WaytoRuntimeException):
    """Exception thrown when a script action does not complete.

    Raised when an action cannot be executed successfully.
    """

    def __init__(
        self,
        message: str = "Script execution failed",
        cause: Exception | None = None,
        action_type: str | None = None,
    ):
        """Initialize script execution exception.

        Args:
            message: Error message
            cause: Underlying exception that caused this error
            action_type: Type of action that failed (if applicable)
        """
        super().__init__(message, cause)
        self.action_type = action_type


class PatternTimeoutError(ScriptExecutionError):
    """A bounded pattern wait elapsed without matching text."""

    def __init__(
        self,
        pattern: str,
        timeout: float,
        action_type: str | None = "WAIT_FOR_PATTERN",
    ):
        """Initialize pattern timeout exception.

        Args:
            pattern: The pattern that was waited for
            timeout: The bound in seconds that was exceeded
            action_type: Type of action that was waiting
        """
        super().__init__(
            f"Timed out after {timeout}s waiting for {pattern!r}",
            action_type=action_type,
        )
        self.pattern = pattern
        self.timeout = timeout


class ExecutionFailureError(ScriptExecutionError):
    """A primitive of the action context failed or is unavailable.

    Connection loss, a missing primitive, a runaway cross-call chain and
    type errors while evaluating script expressions all surface here.
    """
