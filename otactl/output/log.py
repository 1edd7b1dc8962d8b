"""Diagnostic logging setup for the CLI process."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_FORMAT = "%(name)s: %(message)s"


def configure_logging(*, verbose: bool = False) -> None:
    """Route ``otactl.*`` loggers to stderr through Rich.

    WARNING and above by default; ``verbose`` lowers the threshold to DEBUG.
    """
    logger = logging.getLogger("otactl")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
