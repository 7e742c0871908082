"""Logging setup for the command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: int | str = logging.WARNING, console: Console | None = None) -> None:
    """Route the package's log records through a rich handler.

    Safe to call more than once; the previous handler is replaced.

    Args:
        level: Log level for the ``brewops_forms`` logger.
        console: Console to write to. Defaults to stderr.
    """
    handler = RichHandler(
        console=console if console is not None else Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger = logging.getLogger("brewops_forms")
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
