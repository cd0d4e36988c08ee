"""Configuration management for wayto using pydantic-settings.

Settings can be supplied through environment variables (``WAYTO_`` prefix),
a ``.env`` file, or keyword arguments.
"""

import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WaytoSettings(BaseSettings):
    """Main configuration settings for wayto."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="WAYTO_",
        case_sensitive=False,
        extra="forbid",
    )

    # Script settings
    script_marker: str = Field(";e", description="Prefix marking a transition as a script")
    default_wait_timeout: float | None = Field(
        None, gt=0, description="Bound for waitfor without an explicit timeout (None = unbounded)"
    )
    roundtime_poll_interval: float = Field(
        0.1, gt=0, description="Seconds between roundtime checks"
    )
    max_call_depth: int = Field(
        16, ge=1, description="Maximum nesting of cross-map script calls"
    )

    # Loading settings
    strict_loading: bool = Field(
        True, description="Raise on unparsable scripts instead of skipping them"
    )

    # Logging settings
    debug_mode: bool = Field(False, description="Enable debug logging")
    log_level: str = Field("INFO", description="Log level")
    log_path: Path | None = Field(None, description="Directory for log files")
    structured_logs: bool = Field(False, description="Render logs as JSON")

    # Cache settings
    cache_path: Path = Field(
        Path.home() / ".wayto" / "cache", description="Directory for the mapdb cache"
    )
    cache_max_age_days: float = Field(7.0, gt=0, description="Days before the mapdb cache expires")

    @field_validator("script_marker")
    @classmethod
    def _marker_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("script_marker must not be blank")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


class TestingSettings(WaytoSettings):
    """Test-specific settings."""

    model_config = SettingsConfigDict(env_file=".env.test", env_prefix="WAYTO_", extra="forbid")

    roundtime_poll_interval: float = 0.01
    cache_path: Path = Path("./test_cache")


# Singleton instance
_settings: WaytoSettings | None = None


def get_settings(env: str | None = None) -> WaytoSettings:
    """Get the singleton settings instance.

    Args:
        env: Environment name ('test' selects TestingSettings)

    Returns:
        WaytoSettings instance
    """
    global _settings

    if _settings is None:
        env_name = env or os.getenv("WAYTO_ENV", "default")
        if env_name == "test":
            _settings = TestingSettings()
        else:
            _settings = WaytoSettings()

    return _settings


def configure(**overrides) -> WaytoSettings:
    """Replace the singleton with settings built from explicit values."""
    global _settings
    _settings = WaytoSettings(**overrides)
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (mainly for testing)."""
    global _settings
    _settings = None
