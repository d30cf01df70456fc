"""Loguru configuration for the CLI and transport layer with dev/prod detection."""

import sys
from loguru import logger

from story_verifier.config.settings import settings


def configure_logging(level: str | None = None) -> None:
    """
    Configure loguru based on environment settings.

    Behavior:
    - Development (TTY + console format): Colorized, human-readable output
    - Production (non-TTY or json format): JSON-structured logs to stderr
    - Respects LOG_LEVEL from settings unless an explicit level is given

    Args:
        level: Optional level override (the CLI --verbose flag uses this)
    """
    # Drop loguru's default stderr sink before adding ours
    logger.remove()

    log_level = (level or settings.log_level).upper()
    is_tty = sys.stderr.isatty()
    use_console_format = settings.log_format.lower() == "console"

    if is_tty and use_console_format:
        # Interactive terminal
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
                "<cyan>{extra[component]}</cyan> | <level>{message}</level>"
            ),
            level=log_level,
            colorize=True,
        )
    else:
        # Piped or json format: one JSON object per record
        logger.add(
            sys.stderr,
            format="{message}",
            level=log_level,
            serialize=True,
            diagnose=False,  # no local variable values in tracebacks
        )

    # Records emitted without get_logger() still need the component key
    logger.configure(extra={"component": "story_verifier"})


def get_logger(component: str):
    """
    Get a logger instance bound to a specific component name.

    Args:
        component: Component/module name for log context

    Returns:
        Logger instance with component context

    Example:
        >>> log = get_logger("transport.census")
        >>> log.info("Attempt 1/4 succeeded")
    """
    return logger.bind(component=component)


# Configured on import; the CLI reconfigures for --verbose
configure_logging()

__all__ = ["logger", "get_logger", "configure_logging"]
