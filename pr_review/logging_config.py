"""
Logging Configuration

Consistent logging setup for every pr_review module. Handlers always write
to stderr: when the server runs over stdio, stdout carries the MCP JSON-RPC
stream and any stray output there corrupts the protocol.
"""

import logging
import sys
from typing import Optional, Union


DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER_NAME = "pr_review"

_initialized = False


def setup_logging(
    level: Union[int, str] = logging.INFO,
    format_string: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    force: bool = False,
) -> None:
    """
    Configure the package logger.

    Args:
        level: Logging level, as an int or a name like "DEBUG"
        format_string: Log message format
        date_format: Date format for timestamps
        force: Reconfigure even if logging was already set up
    """
    global _initialized

    if _initialized and not force:
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(format_string, datefmt=date_format))
    handler.setLevel(level)

    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    root_logger.propagate = False

    _initialized = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the pr_review namespace.

    Example:
        logger = get_logger(__name__)
        logger.info("Fetched %d files", len(files))
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
