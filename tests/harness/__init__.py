"""Textual in-process test harness for pretty-table-explorer.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, table_text, ...
"""

from tests.harness.app_runner import run_app
from tests.harness.builders import make_psql, make_rows, make_tab, make_workspace
from tests.harness.content import footer_text, prompt_text, split_lines, strips_to_text, table_lines, table_text
from tests.harness.interactions import (
    press_and_settle,
    press_sequence,
    resize_and_settle,
    settle_until,
)

__all__ = [
    "run_app",
    "press_and_settle",
    "press_sequence",
    "resize_and_settle",
    "settle_until",
    "make_psql",
    "make_rows",
    "make_tab",
    "make_workspace",
    "strips_to_text",
    "table_lines",
    "split_lines",
    "table_text",
    "footer_text",
    "prompt_text",
]
