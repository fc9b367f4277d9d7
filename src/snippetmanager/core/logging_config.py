"""Logging setup for the snippetmanager package."""

import logging
from typing import Optional

from rich.logging import RichHandler

from .config import LoggingSettings, get_settings

PACKAGE_LOGGER = "snippetmanager"


def setup_logging(settings: Optional[LoggingSettings] = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        settings: Logging settings; the cached global settings are used if omitted

    Returns:
        The configured package logger
    """
    settings = settings or get_settings().logging
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, settings.level.upper(), logging.INFO))

    logger.handlers.clear()

    if settings.format == "rich":
        handler: logging.Handler = RichHandler(show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    logger.addHandler(handler)
    logger.propagate = False
    return logger
