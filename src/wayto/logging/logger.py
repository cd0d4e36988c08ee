"""Structured logging configuration for wayto using structlog.

Library modules log through ``logging.getLogger(__name__)``; the processors
configured here render those records through the same
``ProcessorFormatter`` as structlog events.
"""

import logging
import os
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, cast

import structlog

from ..config import get_settings


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    structured: bool = True,
    console: bool = True,
    add_timestamp: bool = True,
    colorize: bool = True,
) -> None:
    """Configure structured logging for wayto.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        structured: Use JSON structured output
        console: Enable console output (overridden by WAYTO_DISABLE_CONSOLE_LOGGING env var)
        add_timestamp: Add timestamps to logs
        colorize: Colorize console output (only for non-structured)
    """
    if os.getenv("WAYTO_DISABLE_CONSOLE_LOGGING") == "1":
        console = False

    # Shared by structlog events and by foreign stdlib records
    shared_processors: list[Any] = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
    ]

    if add_timestamp:
        shared_processors.append(structlog.processors.TimeStamper(fmt="iso"))

    shared_processors.extend(
        [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]
    )

    renderer: Any
    if structured:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colorize and console)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handlers: list[logging.Handler] = []

    if console:
        # stdout is reserved for command output
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        handlers=handlers,
        force=True,
    )


_logging_initialized = False


def _ensure_logging_initialized() -> None:
    """Initialize logging from settings on first use, not at import time."""
    global _logging_initialized

    if _logging_initialized:
        return

    try:
        settings = get_settings()
        log_file = None
        if settings.log_path is not None:
            log_file = settings.log_path / f"wayto_{datetime.now().strftime('%Y%m%d')}.log"
        setup_logging(
            level="DEBUG" if settings.debug_mode else settings.log_level,
            log_file=log_file,
            structured=settings.structured_logs,
            colorize=settings.debug_mode,
        )
    except (AttributeError, OSError, ValueError):
        setup_logging(level="INFO", structured=False)

    _logging_initialized = True


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance
    """
    _ensure_logging_initialized()
    return cast(structlog.BoundLogger, structlog.get_logger(name))


class TransitionLogger:
    """Specialized logger for edge traversals."""

    def __init__(self, base_logger: structlog.BoundLogger | None = None) -> None:
        """Initialize transition logger.

        Args:
            base_logger: Base logger to use
        """
        self.logger = base_logger or get_logger(__name__)

    def log_transition_start(
        self, origin: str | None, target_id: str, kind: str, **kwargs
    ) -> dict[str, Any]:
        """Log the start of a traversal.

        Args:
            origin: Origin node, None for the global pool
            target_id: Target node
            kind: Transition kind ("direction" or "script")
            **kwargs: Additional context

        Returns:
            Context dict to hand back to log_transition_end
        """
        context = {
            "origin": origin,
            "target": target_id,
            "kind": kind,
            "start_time": time.monotonic(),
            **kwargs,
        }
        self.logger.info(
            "transition_started", **{k: v for k, v in context.items() if k != "start_time"}
        )
        return context

    def log_transition_end(
        self,
        context: dict[str, Any],
        success: bool,
        failed_action: str | None = None,
        error: Exception | None = None,
    ) -> None:
        """Log the end of a traversal.

        Args:
            context: Context from log_transition_start
            success: Whether the transition completed
            failed_action: Action type that did not complete
            error: Cause of the failure
        """
        log_data = {k: v for k, v in context.items() if k != "start_time"}
        log_data["duration"] = round(time.monotonic() - context["start_time"], 4)
        log_data["success"] = success

        if failed_action:
            log_data["failed_action"] = failed_action

        if error:
            log_data["error"] = str(error)
            log_data["error_type"] = type(error).__name__

        if success:
            self.logger.info("transition_completed", **log_data)
        else:
            self.logger.error("transition_failed", **log_data)
