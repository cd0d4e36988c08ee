"""Logging module for wayto."""

from .logger import TransitionLogger, get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "TransitionLogger",
]
