"""Settings file I/O for pretty-table-explorer.

Manages a general-purpose JSON settings file at
XDG_CONFIG_HOME/pretty-table-explorer/settings.json. Runtime tuning for the
ingestion drain is one consumer; other settings can be added as top-level keys.

This module is a STABLE BOUNDARY.
Import as: import table_explorer.settings
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROWS_PER_TICK = 5000
DEFAULT_TICK_INTERVAL = 1 / 30


@dataclass(frozen=True)
class RuntimeConfig:
    """Resolved runtime tuning (settings file, then environment overrides)."""

    max_rows_per_tick: int = DEFAULT_MAX_ROWS_PER_TICK
    tick_interval: float = DEFAULT_TICK_INTERVAL
    export_dir: str = ""


APP_DIR_NAME = "pretty-table-explorer"
SETTINGS_FILE = "settings.json"


def get_config_path() -> Path:
    """``$XDG_CONFIG_HOME/pretty-table-explorer/settings.json`` (``~/.config`` when unset)."""
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    return Path(base, APP_DIR_NAME, SETTINGS_FILE)


def load_settings() -> dict:
    """Parsed settings, or ``{}`` when the file is absent, unreadable or not an object."""
    path = get_config_path()
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        logger.warning("ignoring unreadable settings file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring settings file %s: top level is not an object", path)
        return {}
    return data


def save_settings(data: dict) -> None:
    """Replace the settings file in one step (temp file in the same dir, then os.replace)."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=path.parent, prefix=".settings-", suffix=".tmp", delete=False
    )
    try:
        with tmp:
            json.dump(data, tmp, indent=2, sort_keys=True)
            tmp.write("\n")
        os.replace(tmp.name, path)
    except Exception:
        os.unlink(tmp.name)
        raise


def load_setting(key: str, default=None):
    return load_settings().get(key, default)


def save_setting(key: str, value) -> None:
    """Merge one key into the stored settings."""
    save_settings({**load_settings(), key: value})


# ─── Export prompt memory ────────────────────────────────────────────

LAST_EXPORT_KEY = "last_export_paths"


def last_export_path(fmt: str) -> str | None:
    """Path last exported in format fmt ("csv" / "json"), if any."""
    paths = load_setting(LAST_EXPORT_KEY, {})
    value = paths.get(fmt) if isinstance(paths, dict) else None
    return value if isinstance(value, str) and value else None


def remember_export_path(fmt: str, path: str) -> None:
    """Record a successful export. Settings write failures are logged, not raised."""
    paths = load_setting(LAST_EXPORT_KEY, {})
    if not isinstance(paths, dict):
        paths = {}
    try:
        save_setting(LAST_EXPORT_KEY, {**paths, fmt: path})
    except OSError as e:
        logger.warning("could not remember export path: %s", e)


def _coerce(raw, cast, default, name: str):
    if raw is None:
        return default
    try:
        value = cast(raw)
    except (TypeError, ValueError):
        logger.warning("ignoring invalid %s=%r", name, raw)
        return default
    if value <= 0:
        logger.warning("ignoring non-positive %s=%r", name, raw)
        return default
    return value


def load_runtime_config() -> RuntimeConfig:
    """Settings file values, overridden by PTE_* environment variables."""
    data = load_settings()
    max_rows = _coerce(
        os.environ.get("PTE_MAX_ROWS_PER_TICK", data.get("max_rows_per_tick")),
        int,
        DEFAULT_MAX_ROWS_PER_TICK,
        "max_rows_per_tick",
    )
    interval = _coerce(
        os.environ.get("PTE_TICK_INTERVAL", data.get("tick_interval")),
        float,
        DEFAULT_TICK_INTERVAL,
        "tick_interval",
    )
    export_dir = str(data.get("export_dir") or "")
    return RuntimeConfig(max_rows_per_tick=max_rows, tick_interval=interval, export_dir=export_dir)
