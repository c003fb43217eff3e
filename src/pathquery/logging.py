# pathquery/logging.py
"""
Logging setup for the pathquery package.

All modules use:
    from pathquery.logging import get_logger
    logger = get_logger(__name__)

Configuration happens once, in the application that embeds pathquery,
through `configure_logging` or `configure_from_settings`.
"""

import logging
import sys

from pathquery.config.settings import Settings


DEFAULT_FORMAT = "[%(levelname)s] %(name)s - %(message)s"


def configure_logging(
    level=logging.INFO,
    fmt: str = DEFAULT_FORMAT,
    stream=sys.stdout,
):
    """
    Configure the root logging handler.

    Safe to call multiple times; a second handler is never added.
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)

    root.setLevel(level)


def configure_from_settings(settings: Settings, stream=sys.stdout):
    """Configure logging from a loaded `Settings` instance."""
    configure_logging(
        level=settings.logging.level.upper(),
        fmt=settings.logging.format,
        stream=stream,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Modules call this to get a logger.

    Do NOT configure logging here; see configure_logging().
    """
    return logging.getLogger(name)
