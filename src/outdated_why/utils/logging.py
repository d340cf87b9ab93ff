"""Logging setup for outdated-why.

Log records go to stderr through rich, so stdout only ever carries the
JSON or markdown report.
"""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "outdated_why"

_handler: Optional[RichHandler] = None


def level_for_verbosity(verbose: bool = False, quiet: bool = False) -> int:
    """Map the CLI verbosity flags to a log level (verbose wins)."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(level: Union[int, str] = logging.INFO, show_time: bool = False) -> logging.Logger:
    """Attach the rich stderr handler to the package logger and set its level.

    Safe to call repeatedly: the handler is installed once and later calls
    only change the level.

    Args:
        level: Log level as a number or name (DEBUG, INFO, WARNING, ...).
        show_time: Prefix records with a timestamp.

    Returns:
        The package logger.
    """
    global _handler

    logger = logging.getLogger(PACKAGE_LOGGER)

    if _handler is None:
        _handler = RichHandler(
            console=Console(stderr=True),
            show_time=show_time,
            show_path=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=False,
        )
        _handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(_handler)

    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given module name.

    Args:
        name: Module name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
