"""Configuration package.

Usage:
    from wayto.config import get_settings

    settings = get_settings()
    marker = settings.script_marker
"""

from .settings import TestingSettings, WaytoSettings, configure, get_settings, reset_settings

__all__ = ["WaytoSettings", "TestingSettings", "get_settings", "configure", "reset_settings"]
