"""
Logging configuration for Kthulu Insight.

Everything is logged through the ``kthulu_insight`` logger. The root logger
is never configured, so applications embedding the analyzer keep their own
setup.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "kthulu_insight"

# Worker threads parse files concurrently; the file log names them
FILE_FORMAT = "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s"


def _console_level(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Attach a stderr rich handler, and optionally a file handler, to the package logger.

    Handlers from a previous call are removed first, so repeated CLI
    invocations in one process do not duplicate output.

    Args:
        verbose: Show DEBUG records on the console
        quiet: Show only ERROR records on the console
        log_file: Append every record, DEBUG included, to this file

    Returns:
        The ``kthulu_insight`` logger
    """
    level = _console_level(verbose, quiet)
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Scan warnings embed literal "[KT201]" codes, so markup stays off
    console_handler = RichHandler(
        console=Console(stderr=True),
        level=level,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        show_path=verbose,
    )
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG if log_file else level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``kthulu_insight`` namespace.

    Package modules pass ``__name__`` through unchanged; any other name is
    prefixed, and ``None`` gives the package logger itself.
    """
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
