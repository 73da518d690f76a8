"""Logging setup for the ``gbp`` logger tree.

Modules log through ``get_logger(__name__)``; the CLI calls
``setup_logging`` once to attach a Rich handler.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["get_logger", "setup_logging"]

ROOT_LOGGER = "gbp"


def setup_logging(level: str = "INFO", *, verbose: bool = False) -> logging.Logger:
    """Configure the ``gbp`` logger.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ...); unknown names fall back to INFO
        verbose: Force DEBUG and include source paths in records

    Returns:
        The configured root ``gbp`` logger
    """
    numeric_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    # Logs go to stderr so `report --json` stays machine readable.
    handler = RichHandler(
        console=Console(stderr=True),
        level=numeric_level,
        show_path=verbose,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the ``gbp`` tree.

    Accepts either a module ``__name__`` (already prefixed) or a short name.
    """
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
