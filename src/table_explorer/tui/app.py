"""Main TUI application using Textual.

// [LAW:locality-or-seam] Thin coordinator: tab state lives in app.workspace,
//   frame data in core.projection, ingestion in pipeline.ingestor.
// [LAW:single-enforcer] on_key is the sole key dispatcher; every key event is
//   applied and then rendered exactly once via _refresh_view().
"""

from __future__ import annotations

import logging
import traceback
from pathlib import Path

from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.css.query import NoMatches

from table_explorer.app.workspace import PAGE_ROWS, WIDTH_STEP, Tab, Workspace
from table_explorer.core.export import DEFAULT_FILENAMES, ExportError, ExportFormat, export_table, save_to_file
from table_explorer.pipeline.ingestor import StreamingIngestor, StreamReadError
from table_explorer.settings import RuntimeConfig, last_export_path, remember_export_path
from table_explorer.tui.input_modes import (
    FOOTER_HINTS,
    MODE_KEYMAP,
    SPLIT_HINTS,
    STREAM_HINTS,
    TAB_HINTS,
    UNSPLIT_HINTS,
    InputMode,
)
from table_explorer.tui.prompt_bar import PromptBar, PromptState
from table_explorer.tui.status_footer import FooterState, StatusFooter
from table_explorer.tui.table_view import TableView

logger = logging.getLogger(__name__)

STATUS_SECONDS = 3.0
# Upper bound on joining the ingest thread; a producer parked in a blocking read is a
# daemon thread and is abandoned after this.
JOIN_TIMEOUT = 1.0

_TEXT_MODES = (InputMode.FILTER_EDIT, InputMode.EXPORT_FILENAME)


class TableExplorerApp(App):
    """Interactive explorer over one or more tabular datasets."""

    TITLE = "pretty-table-explorer"

    DEFAULT_CSS = """
    Screen {
        layout: vertical;
    }
    """

    def __init__(
        self,
        workspace: Workspace,
        *,
        ingestor: StreamingIngestor | None = None,
        stream_tab: Tab | None = None,
        config: RuntimeConfig | None = None,
    ) -> None:
        super().__init__()
        self._workspace = workspace
        self._ingestor = ingestor
        self._stream_tab = stream_tab if ingestor is not None else None
        self._config = config or RuntimeConfig()

        self._mode = InputMode.NORMAL
        self._prompt_text = ""
        self._export_format: ExportFormat | None = None
        self._status = ""
        self._status_timer = None
        self._drain_timer = None

    # ─── Accessors ─────────────────────────────────────────────────────

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    @property
    def input_mode(self) -> InputMode:
        return self._mode

    @property
    def status_message(self) -> str:
        return self._status

    @property
    def streaming(self) -> bool:
        return self._ingestor is not None

    def _query_safe(self, selector):
        try:
            return self.query_one(selector)
        except NoMatches:
            return None

    def _get_table(self) -> TableView | None:
        return self._query_safe("#table")

    def _get_split(self) -> TableView | None:
        return self._query_safe("#split")

    def _get_prompt(self) -> PromptBar | None:
        return self._query_safe(PromptBar)

    def _get_footer(self) -> StatusFooter | None:
        return self._query_safe(StatusFooter)

    # ─── Lifecycle ─────────────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        split = TableView(id="split")
        split.display = False
        with Horizontal(id="panes"):
            yield TableView(id="table")
            yield split
        yield PromptBar(id="prompt")
        yield StatusFooter(id="footer")

    def on_mount(self) -> None:
        if self._ingestor is not None:
            logger.info(
                "draining ingestor every %.3fs, max %d rows per tick",
                self._config.tick_interval,
                self._config.max_rows_per_tick,
            )
            self._drain_timer = self.set_interval(self._config.tick_interval, self._drain_tick)
        self._refresh_view()

    def on_unmount(self) -> None:
        logger.info("TUI shutting down")
        if self._drain_timer is not None:
            self._drain_timer.stop()
            self._drain_timer = None
        if self._ingestor is not None:
            self._ingestor.close(timeout=JOIN_TIMEOUT)
            self._ingestor = None

    def _handle_exception(self, error: Exception) -> None:
        """// [LAW:single-enforcer] Top-level exception handler.

        Logs unhandled exceptions with a normal Python traceback and surfaces
        them as a status message instead of tearing down the terminal.
        """
        tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        logger.error("Unhandled exception: %s\n%s", error, tb)
        self._set_status(f"{type(error).__name__}: {error}")

    # ─── Streaming ─────────────────────────────────────────────────────

    def _drain_tick(self) -> None:
        ingestor = self._ingestor
        if ingestor is None:
            return
        try:
            rows = ingestor.try_receive(self._config.max_rows_per_tick)
        except StreamReadError as e:
            logger.error("input stream failed: %s", e)
            self._finish_stream(f"Read error: {e}")
            self._refresh_view()
            return

        if rows and self._stream_tab is not None:
            self._stream_tab.append_rows(rows)
            logger.debug("drained %d rows (total %d)", len(rows), self._stream_tab.total_rows)

        if ingestor.is_drained():
            total = self._stream_tab.total_rows if self._stream_tab is not None else 0
            if ingestor.cancelled:
                self._finish_stream(f"Loading cancelled at {total} rows")
            else:
                self._finish_stream(f"Loaded {total} rows")
            self._refresh_view()
        elif rows:
            self._refresh_view()

    def _finish_stream(self, message: str) -> None:
        if self._drain_timer is not None:
            self._drain_timer.stop()
            self._drain_timer = None
        if self._ingestor is not None:
            self._ingestor.close(timeout=JOIN_TIMEOUT)
            self._ingestor = None
        logger.info(message)
        self._set_status(message)

    # ─── Rendering ─────────────────────────────────────────────────────

    def _hints(self) -> str:
        hints = FOOTER_HINTS[self._mode]
        if self._mode != InputMode.NORMAL:
            return hints
        prefix = ""
        if self._workspace.is_split:
            prefix = SPLIT_HINTS + TAB_HINTS
        elif self._workspace.tab_count() > 1:
            prefix = UNSPLIT_HINTS + TAB_HINTS
        if self._ingestor is not None:
            prefix = STREAM_HINTS + prefix
        return prefix + hints

    def _footer_state(self) -> FooterState:
        ingestor = self._ingestor
        loading_rows = None
        if ingestor is not None and self._stream_tab is not None:
            loading_rows = self._stream_tab.total_rows
        return FooterState(
            tab_bar=self._workspace.tab_bar(),
            loading_rows=loading_rows,
            cancelled=ingestor is not None and ingestor.cancelled,
            status=self._status,
            hints=self._hints(),
        )

    def _loading_label(self, tab: Tab | None) -> str:
        if self._ingestor is not None and tab is not None and tab is self._stream_tab:
            return "(streaming)"
        return ""

    def _refresh_view(self) -> None:
        workspace = self._workspace
        split = workspace.is_split
        table = self._get_table()
        if table is not None:
            tab = workspace.active_tab()
            table.show(tab, loading=self._loading_label(tab), marked=split and workspace.focus_left)
        right = self._get_split()
        if right is not None:
            right.display = split
            tab = workspace.split_tab()
            right.show(tab, loading=self._loading_label(tab), marked=split and not workspace.focus_left)
        prompt = self._get_prompt()
        if prompt is not None:
            prompt.update_display(PromptState(self._mode, self._prompt_text))
        footer = self._get_footer()
        if footer is not None:
            footer.update_display(self._footer_state())

    def _set_status(self, message: str) -> None:
        self._status = message
        if self._status_timer is not None:
            self._status_timer.stop()
        self._status_timer = self.set_timer(STATUS_SECONDS, self._clear_status)

    def _clear_status(self) -> None:
        self._status = ""
        self._status_timer = None
        self._refresh_view()

    # ─── Key dispatch ──────────────────────────────────────────────────

    async def on_key(self, event) -> None:
        """// [LAW:single-enforcer] on_key is the sole key dispatcher.

        Text prompts consume every key. Otherwise the mode's keymap resolves
        the key to an action; the action runs, then the view is rendered once.
        """
        mode = self._mode
        if mode in _TEXT_MODES:
            event.prevent_default()
            event.stop()
            self._handle_text_key(event)
            self._refresh_view()
            return

        keymap = MODE_KEYMAP.get(mode, MODE_KEYMAP[InputMode.NORMAL])
        action_name = keymap.get(event.key)
        if action_name is None and event.character:
            action_name = keymap.get(event.character)
        if action_name:
            event.prevent_default()
            event.stop()
            await self.run_action(action_name)
            self._refresh_view()

    def _handle_text_key(self, event) -> None:
        """Keystrokes while editing the filter or the export filename."""
        key = event.key
        if key == "escape":
            self.action_cancel_prompt()
            return
        if key == "enter":
            self._submit_prompt()
            return
        if key == "backspace":
            self._prompt_text = self._prompt_text[:-1]
            return
        if key == "ctrl+u":
            self._prompt_text = ""
            return
        if event.is_printable and event.character:
            self._prompt_text += event.character

    def _submit_prompt(self) -> None:
        mode = self._mode
        text = self._prompt_text.strip()
        self._mode = InputMode.NORMAL
        self._prompt_text = ""
        if mode == InputMode.FILTER_EDIT:
            tab = self._active()
            if tab is not None:
                tab.apply_filter(text)
                logger.debug("filter %r -> %d rows", text, tab.displayed_row_count)
            return
        fmt = self._export_format
        self._export_format = None
        if fmt is not None and text:
            self._export(fmt, text)

    # ─── Actions: rows ─────────────────────────────────────────────────

    def _active(self) -> Tab | None:
        return self._workspace.focused_tab()

    def action_move_row(self, delta: int) -> None:
        tab = self._active()
        if tab is not None:
            tab.move_row(delta)

    def action_go_top(self) -> None:
        tab = self._active()
        if tab is not None:
            tab.go_top()

    def action_go_bottom(self) -> None:
        tab = self._active()
        if tab is not None:
            tab.go_bottom()

    def action_page_down(self) -> None:
        self.action_move_row(PAGE_ROWS)

    def action_page_up(self) -> None:
        self.action_move_row(-PAGE_ROWS)

    # ─── Actions: columns ──────────────────────────────────────────────

    def action_move_col(self, delta: int) -> None:
        tab = self._active()
        if tab is not None:
            tab.move_col(delta)

    def action_widen_column(self) -> None:
        tab = self._active()
        if tab is not None:
            tab.adjust_selected_width(WIDTH_STEP)

    def action_narrow_column(self) -> None:
        tab = self._active()
        if tab is not None:
            tab.adjust_selected_width(-WIDTH_STEP)

    def action_reset_columns(self) -> None:
        tab = self._active()
        if tab is not None:
            tab.reset_columns()

    def action_hide_column(self) -> None:
        tab = self._active()
        if tab is not None and not tab.hide_selected_column():
            self._set_status("Cannot hide the last visible column")

    def action_show_all_columns(self) -> None:
        tab = self._active()
        if tab is not None:
            tab.show_all_columns()

    def action_move_column(self, delta: int) -> None:
        tab = self._active()
        if tab is not None:
            tab.move_column(delta)

    # ─── Actions: tabs ─────────────────────────────────────────────────

    def action_next_tab(self) -> None:
        if self._workspace.is_split:
            self._workspace.toggle_focus()
        else:
            self._workspace.next_tab()

    def action_prev_tab(self) -> None:
        if self._workspace.is_split:
            self._workspace.toggle_focus()
        else:
            self._workspace.prev_tab()

    def action_switch_tab(self, idx: int) -> None:
        if idx < self._workspace.tab_count():
            self._workspace.switch_to(idx)

    def action_close_tab(self) -> None:
        workspace = self._workspace
        if workspace.tab_count() <= 1:
            return
        closed = workspace.close_tab(workspace.focused_idx())
        if closed is not None and closed is self._stream_tab and self._ingestor is not None:
            self._ingestor.cancel()
            self._finish_stream(f"Closed {closed.name}; loading stopped")
            self._stream_tab = None

    def action_duplicate_tab(self) -> None:
        tab = self._active()
        if tab is None:
            return
        idx = self._workspace.add_tab(tab.duplicate(f"{tab.name} (copy)"))
        self._workspace.switch_to(idx)
        self._set_status(f"Opened in tab {idx + 1}")

    # ─── Actions: split view ───────────────────────────────────────────

    def action_toggle_split(self) -> None:
        if self._workspace.tab_count() < 2:
            self._set_status("Split view needs at least two tabs")
            return
        split = self._workspace.toggle_split()
        logger.debug("split view %s", "on" if split else "off")

    def action_toggle_focus(self) -> None:
        self._workspace.toggle_focus()

    # ─── Actions: streaming ────────────────────────────────────────────

    def action_cancel_loading(self) -> None:
        if self._ingestor is not None and not self._ingestor.cancelled:
            self._ingestor.cancel()

    # ─── Actions: prompts ──────────────────────────────────────────────

    def action_start_filter(self) -> None:
        tab = self._active()
        self._mode = InputMode.FILTER_EDIT
        self._prompt_text = tab.filter_text if tab is not None else ""

    def action_start_export(self) -> None:
        if self._active() is not None:
            self._mode = InputMode.EXPORT_FORMAT

    def action_choose_export(self, fmt: str) -> None:
        self._export_format = ExportFormat(fmt)
        self._prompt_text = last_export_path(fmt) or DEFAULT_FILENAMES[self._export_format]
        self._mode = InputMode.EXPORT_FILENAME

    def action_cancel_prompt(self) -> None:
        self._mode = InputMode.NORMAL
        self._prompt_text = ""
        self._export_format = None

    def _export(self, fmt: ExportFormat, filename: str) -> None:
        tab = self._active()
        if tab is None:
            return
        path = Path(filename).expanduser()
        if not path.is_absolute() and self._config.export_dir:
            path = Path(self._config.export_dir).expanduser() / path
        content = export_table(list(tab.store.headers), tab.resolved_rows(), tab.visible_cols(), fmt)
        try:
            saved = save_to_file(content, path)
        except ExportError as e:
            logger.warning("export failed: %s", e)
            self._set_status(str(e))
            return
        logger.info("exported %d rows to %s", tab.displayed_row_count, saved)
        remember_export_path(fmt.value, filename)
        self._set_status(f"Exported to {saved}")

    def action_quit(self) -> None:
        self.exit()
