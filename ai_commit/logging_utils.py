"""Logging setup for the ai-commit CLI."""

from __future__ import annotations

import logging


def configure_logging(verbosity: int) -> None:
    """
    Configure the root logger from a -v count.

    verbosity == 0 -> WARNING
    verbosity == 1 -> INFO (process output shows up here)
    verbosity >= 2 -> DEBUG (plus the RUN/RES lines of every command)
    """

    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )
