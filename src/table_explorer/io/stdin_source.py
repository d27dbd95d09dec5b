"""Piped stdin handoff.

The data arrives on fd 0, but the TUI also needs fd 0 for keyboard input.
The pipe is duplicated onto a private fd for the ingestor and the controlling
terminal is reattached as fd 0 before the app starts.
"""

from __future__ import annotations

import io
import logging
import os
import sys
from typing import TextIO

logger = logging.getLogger(__name__)


def stdin_is_piped() -> bool:
    stdin = sys.__stdin__
    return stdin is not None and not stdin.isatty()


def open_piped_stdin() -> TextIO | None:
    """Detach piped stdin into its own text stream; None if stdin is a TTY.

    Raises OSError when no controlling terminal can be reattached.
    """
    if not stdin_is_piped():
        return None

    data_fd = os.dup(0)
    try:
        tty_fd = os.open("/dev/tty", os.O_RDONLY)
    except OSError:
        os.close(data_fd)
        raise
    try:
        os.dup2(tty_fd, 0)
    finally:
        os.close(tty_fd)
    sys.stdin = open(0, "r", closefd=False)
    logger.debug("piped stdin moved to fd=%d, /dev/tty attached to fd 0", data_fd)

    raw = os.fdopen(data_fd, "rb", buffering=0)
    return io.TextIOWrapper(io.BufferedReader(raw), encoding="utf-8", errors="replace")
