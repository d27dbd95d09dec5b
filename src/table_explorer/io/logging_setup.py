"""Logging bootstrap for pte.

Every module logs through ``logging.getLogger(__name__)``; handlers hang off
the single ``table_explorer`` logger configured here.

// [LAW:single-enforcer] Handler wiring happens in this module only.
// [LAW:one-source-of-truth] The resolved log path and level live in LoggingRuntime.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "table_explorer"

LOG_MAX_BYTES = 20 * 1024 * 1024
LOG_BACKUPS = 5
DEFAULT_LOG_DIR = "~/.local/share/pretty-table-explorer/logs"

FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(threadName)s] %(message)s"
STREAM_FORMAT = "pte %(levelname)s %(name)s: %(message)s"

_UNSAFE = re.compile(r"[^A-Za-z0-9_-]+")


@dataclass(frozen=True)
class LoggingRuntime:
    level_name: str
    level: int
    file_path: str


_runtime: LoggingRuntime | None = None


def _resolve_level(requested: str | None) -> int:
    """Level from the argument, else PTE_LOG_LEVEL, else INFO. Unknown names mean INFO."""
    name = (requested or os.environ.get("PTE_LOG_LEVEL") or "INFO").strip().upper()
    # getLevelName maps a registered name to its number, anything else to a str.
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def _log_file_for(session_name: str) -> Path:
    explicit = os.environ.get("PTE_LOG_FILE")
    if explicit:
        return Path(explicit).expanduser()
    slug = _UNSAFE.sub("-", session_name).strip("-_") or "session"
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_dir = Path(os.environ.get("PTE_LOG_DIR") or DEFAULT_LOG_DIR).expanduser()
    return log_dir / f"{slug}-{stamp}-{os.getpid()}.log"


def configure(
    session_name: str = "session",
    *,
    level: str | None = None,
    stream: bool = False,
) -> LoggingRuntime:
    """Attach handlers to the ``table_explorer`` logger and return the runtime.

    A rotating file handler is always installed. A stderr handler is added
    only with ``stream=True``: the TUI owns the terminal while it runs.

    Idempotent: later calls return the first runtime unchanged.
    """
    global _runtime
    if _runtime is not None:
        return _runtime

    level_value = _resolve_level(level)
    log_file = _log_file_for(session_name)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_file, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    handlers: list[logging.Handler] = [file_handler]
    if stream:
        stderr_handler = logging.StreamHandler()
        stderr_handler.setFormatter(logging.Formatter(STREAM_FORMAT))
        handlers.insert(0, stderr_handler)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.setLevel(level_value)
    logger.propagate = False
    for handler in handlers:
        handler.setLevel(level_value)
        logger.addHandler(handler)

    logging.captureWarnings(True)

    _runtime = LoggingRuntime(logging.getLevelName(level_value), level_value, str(log_file))
    return _runtime


def get_runtime() -> LoggingRuntime | None:
    return _runtime


def reset() -> None:
    """Detach and close every handler; the next configure() starts fresh (tests)."""
    global _runtime
    logger = logging.getLogger(ROOT_LOGGER)
    while logger.handlers:
        handler = logger.handlers[0]
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    _runtime = None
