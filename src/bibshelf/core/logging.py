from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def _level_for(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(verbosity: int = 0) -> None:
    """Route log records to stderr through rich, leaving stdout for command output."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbosity >= 2,
        show_path=False,
        markup=False,
    )
    logging.basicConfig(
        level=_level_for(verbosity),
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING if verbosity < 2 else logging.DEBUG)
