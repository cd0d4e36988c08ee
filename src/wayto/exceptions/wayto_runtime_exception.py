"""Wayto runtime exception.

Base exception for the package.
"""


class WaytoRuntimeException(RuntimeError):
    """Base runtime exception for all wayto exceptions.

    Lookup misses, script failures and configuration problems all derive from
    this class so callers can handle every wayto error at one point.
    """

    def __init__(self, message: str | None = None, cause: Exception | None = None):
        """Construct a new runtime exception.

        Args:
            message: The detail message
            cause: The cause of the exception
        """
        if message and cause:
            super().__init__(f"{message}: {cause}")
            self.__cause__ = cause
        elif message:
            super().__init__(message)
        elif cause:
            super().__init__(str(cause))
            self.__cause__ = cause
        else:
            super().__init__()
        self.cause = cause
        # Set by the script executor to the innermost action that did not complete
        self.failed_action = None
