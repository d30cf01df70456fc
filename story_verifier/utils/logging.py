"""Structured logging utilities using structlog for verification tracing."""

import os
import sys
import uuid
from typing import Any, Optional
import structlog
from structlog.processors import JSONRenderer
from structlog.contextvars import bind_contextvars, merge_contextvars, unbind_contextvars

# Console rendering only when attached to a terminal and LOG_FORMAT=console
IS_TTY = sys.stderr.isatty()
LOG_FORMAT = os.getenv("LOG_FORMAT", "console").lower()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_structured_logging() -> None:
    """
    Configure structured logging with appropriate processors and renderers.

    Uses:
    - Console renderer for development (colorized, human-readable)
    - JSON renderer for production (structured, machine-readable)
    - Context variables so every adapter log line carries the story_id
    """
    processors = [
        merge_contextvars,  # story_id / correlation_id from bind_story_context
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    # Last processor renders the event
    if IS_TTY and LOG_FORMAT == "console":
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    else:
        processors.append(JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_structured_logger(
    name: str,
    **additional_context: Any,
) -> structlog.BoundLogger:
    """
    Get a structured logger with bound context.

    Args:
        name: Logger name (typically module name)
        **additional_context: Additional context to bind

    Returns:
        Configured BoundLogger instance with context

    Example:
        >>> logger = get_structured_logger("adapters.housing", adapter="housing")
        >>> logger.info("dataset_fetched", state="TX", degraded=False)
    """
    logger = structlog.get_logger(name)
    # Bound context rides along on every event from this logger
    if additional_context:
        logger = logger.bind(**additional_context)
    return logger


def get_correlation_id() -> str:
    """Generate a correlation ID for tracing one verification request."""
    return str(uuid.uuid4())


def bind_story_context(story_id: str, correlation_id: Optional[str] = None) -> str:
    """
    Bind story_id and correlation_id to the current context.

    Every structlog call made by adapters running inside this task (and the
    tasks it spawns) carries both keys until unbind_story_context is called.

    Returns:
        The correlation ID in use
    """
    # A caller-supplied id wins
    correlation_id = correlation_id or get_correlation_id()
    bind_contextvars(story_id=story_id, correlation_id=correlation_id)
    return correlation_id


def unbind_story_context() -> None:
    """Remove story tracing keys from the current context."""
    unbind_contextvars("story_id", "correlation_id")


configure_structured_logging()


__all__ = [
    "get_structured_logger",
    "get_correlation_id",
    "bind_story_context",
    "unbind_story_context",
    "configure_structured_logging",
]
