"""Tests for centralized logging bootstrap."""

import logging
from logging.handlers import RotatingFileHandler

import table_explorer.io.logging_setup as logging_setup


def _handlers():
    return logging.getLogger(logging_setup.ROOT_LOGGER).handlers


class TestConfigure:
    def test_file_only_by_default(self, tmp_path):
        runtime = logging_setup.configure("my session!")
        assert runtime.level_name == "INFO"
        assert runtime.file_path.startswith(str(tmp_path / "logs"))
        assert "my-session" in runtime.file_path
        assert [type(h) for h in _handlers()] == [RotatingFileHandler]

    def test_stream_handler_is_opt_in(self):
        logging_setup.configure("s", stream=True)
        kinds = {type(h) for h in _handlers()}
        assert logging.StreamHandler in kinds
        assert RotatingFileHandler in kinds

    def test_level_from_env(self, monkeypatch):
        monkeypatch.setenv("PTE_LOG_LEVEL", "debug")
        runtime = logging_setup.configure("s")
        assert runtime.level == logging.DEBUG

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("PTE_LOG_LEVEL", "DEBUG")
        assert logging_setup.configure("s", level="warning").level_name == "WARNING"

    def test_unknown_level_falls_back_to_info(self):
        assert logging_setup.configure("s", level="chatty").level == logging.INFO

    def test_log_file_env(self, tmp_path, monkeypatch):
        target = tmp_path / "nested" / "pte.log"
        monkeypatch.setenv("PTE_LOG_FILE", str(target))
        runtime = logging_setup.configure("s")
        assert runtime.file_path == str(target)
        logging.getLogger("table_explorer.tests").warning("hello from tests")
        for handler in _handlers():
            handler.flush()
        assert "hello from tests" in target.read_text()

    def test_idempotent(self):
        first = logging_setup.configure("a")
        second = logging_setup.configure("b", level="DEBUG")
        assert first is second
        assert logging_setup.get_runtime() is first
        assert len(_handlers()) == 1


def test_reset_drops_handlers():
    logging_setup.configure("s")
    logging_setup.reset()
    assert _handlers() == []
    assert logging_setup.get_runtime() is None
