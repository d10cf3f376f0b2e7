"""
Logging setup for the rustup-mirror commands.

Records go to stderr so that command output on stdout (status lines,
run summaries) stays clean to pipe. Colors are used only when stderr is
a terminal and `NO_COLOR` is not set.
"""

from __future__ import annotations

import logging
import os
import sys

import colorlog

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "bold_green",
    "WARNING": "bold_yellow",
    "ERROR": "bold_red",
    "CRITICAL": "bold_red,bg_white",
}

_DATEFMT = "%Y-%m-%d %H:%M:%S"
_PLAIN_FORMAT = "[%(asctime)s] <%(name)s> %(levelname)s: %(message)s"
_COLOR_FORMAT = "%(log_color)s[%(asctime)s] <%(name)s> %(levelname)s:%(reset)s %(message)s"


def _use_color() -> bool:
    return os.getenv("NO_COLOR") is None and sys.stderr.isatty()


def configure_logging(verbose: bool) -> None:
    """
    Route every `rustup_mirror/*` logger to stderr.

    `verbose` lowers the level to DEBUG, which adds per-file decisions
    (skipped downloads, kept nightlies, removed sidecars). Each command
    calls this once, replacing any handler installed by a previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    if _use_color():
        handler.setFormatter(
            colorlog.ColoredFormatter(fmt=_COLOR_FORMAT, log_colors=LOG_COLORS, datefmt=_DATEFMT)
        )
    else:
        handler.setFormatter(logging.Formatter(fmt=_PLAIN_FORMAT, datefmt=_DATEFMT))
    logging.basicConfig(level=level, handlers=[handler], force=True)


log = logging.getLogger("rustup_mirror/cli")
"""Logger shared by the command implementations."""
