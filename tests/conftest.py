"""Pytest configuration and shared fixtures for pretty-table-explorer tests."""

import io
import os

import pytest

import table_explorer.io.logging_setup

from tests.harness.builders import make_psql, make_rows


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep settings, logs and PTE_* overrides out of the user's real dirs."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("PTE_LOG_DIR", str(tmp_path / "logs"))
    for name in ("PTE_LOG_FILE", "PTE_LOG_LEVEL", "PTE_MAX_ROWS_PER_TICK", "PTE_TICK_INTERVAL"):
        monkeypatch.delenv(name, raising=False)
    yield
    table_explorer.io.logging_setup.reset()


# ---------------------------------------------------------------------------
# Input streams
# ---------------------------------------------------------------------------

@pytest.fixture
def psql_stream():
    """Factory: StringIO holding a psql dump of n generated rows."""
    def _make(n=10, *, footer=True):
        return io.StringIO(make_psql(["id", "name", "city"], make_rows(n), footer=footer))
    return _make


@pytest.fixture
def pipe_stream():
    """Factory: (reader text stream, writer text stream) over an os.pipe.

    Readers block until the writer writes or closes, like a live psql pipe.
    """
    opened = []

    def _make():
        r, w = os.pipe()
        reader = os.fdopen(r, "r", encoding="utf-8")
        writer = os.fdopen(w, "w", encoding="utf-8", buffering=1)
        opened.extend([writer, reader])
        return reader, writer

    yield _make
    for stream in opened:
        try:
            stream.close()
        except (OSError, ValueError):
            pass
