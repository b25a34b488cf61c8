"""Logging configuration for wikidown.

Modules log through ``logging.getLogger(__name__)``; this installs the one
handler on the package logger. The level comes from the ``level`` argument or
the WIKIDOWN_LOG_LEVEL environment variable (default WARNING).
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "wikidown"


def resolve_level(level: Optional[str] = None) -> int:
    name = (level or os.environ.get("WIKIDOWN_LOG_LEVEL") or "WARNING").upper()
    return getattr(logging, name, logging.WARNING)


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure the wikidown package logger.

    The handler is installed once; later calls only adjust the level.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    resolved = resolve_level(level)
    logger.setLevel(resolved)

    if not logger.handlers:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
        # Prevent duplicate messages via the root logger
        logger.propagate = False

    for handler in logger.handlers:
        handler.setLevel(resolved)
    return logger
