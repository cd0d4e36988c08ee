"""Wayto Command Line Interface.

Provides CLI commands for:
- Validating map files and reporting data quality issues
- Looking up and listing edges
- Listing rooms by location or ID range
- Dry-running transitions against a mock session

Usage:
    python -m wayto.cli --help
    python -m wayto.cli lookup mapdb.json 28908 26905

Or via the installed entry point:
    wayto --help
"""

from .main import main

__all__ = ["main"]
