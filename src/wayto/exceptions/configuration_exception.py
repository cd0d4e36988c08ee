"""Configuration exceptions.

Exceptions thrown when map data is invalid or cannot be loaded.
"""

from .wayto_runtime_exception import WaytoRuntimeException


class ConfigurationError(WaytoRuntimeException):
    """Exception thrown when configuration is invalid or missing.

    Raised during map data parsing or validation.
    """

    def __init__(
        self,
        message: str = "Configuration error",
        cause: Exception | None = None,
        config_key: str | None = None,
    ):
        """Initialize configuration exception.

        Args:
            message: Error message
            cause: Underlying exception that caused this error
            config_key: Configuration key that caused the error (if applicable)
        """
        super().__init__(message, cause)
        self.config_key = config_key


class ScriptParseError(ConfigurationError):
    """Raised when stringproc text does not parse."""

    def __init__(
        self,
        source: str,
        cause: Exception | None = None,
        origin: str | None = None,
        target_id: str | None = None,
    ):
        """Initialize script parse exception.

        Args:
            source: The script text that failed to parse
            cause: Underlying lark error
            origin: Origin table the script was loaded from
            target_id: Target ID the script was registered under
        """
        where = ""
        if target_id is not None:
            where = f" for edge {origin or '<global>'} -> {target_id}"
        super().__init__(f"Cannot parse script{where}: {source!r}", cause, config_key=target_id)
        self.source = source
        self.origin = origin
        self.target_id = target_id


class DuplicateEdgeError(ConfigurationError):
    """Raised when one wayto block lists the same target twice with different text."""

    def __init__(self, target_id: str, origin: str | None, first: str, second: str):
        super().__init__(
            f"Conflicting duplicate edge {origin or '<global>'} -> {target_id}: "
            f"{first!r} vs {second!r}",
            config_key=target_id,
        )
        self.target_id = target_id
        self.origin = origin
        self.first = first
        self.second = second
