"""In-process Textual tests for key dispatch, prompts, tabs and streaming."""

import io
import json

import pytest

from table_explorer.app.workspace import Tab, ViewMode
from table_explorer.core.export import UTF8_BOM
from table_explorer.core.table_store import TabularStore
from table_explorer.pipeline.ingestor import StreamingIngestor
from table_explorer.settings import RuntimeConfig
from table_explorer.tui.input_modes import InputMode

from tests.harness import (
    footer_text,
    make_psql,
    make_rows,
    make_tab,
    make_workspace,
    press_and_settle,
    press_sequence,
    prompt_text,
    resize_and_settle,
    run_app,
    settle_until,
    split_lines,
    table_lines,
)

pytestmark = pytest.mark.textual


class TestRendering:
    async def test_initial_frame(self):
        async with run_app() as (pilot, app):
            lines = table_lines(app)
            assert lines[0].startswith("┌─ data [Row 1/50 C1/3]")
            assert "id" in lines[1] and "name" in lines[1] and "city" in lines[1]
            assert lines[2].startswith("│>> 0")
            assert "user0" in lines[2]
            assert lines[3].startswith("│   1")
            assert lines[-1].startswith("└")

    async def test_indicators_on_narrow_terminal(self):
        headers = [f"column_{i:02d}" for i in range(12)]
        rows = [[f"v{r}_{c}" for c in range(12)] for r in range(5)]
        async with run_app(make_workspace(make_tab("wide", headers, rows)), size=(40, 12)) as (pilot, app):
            assert "▶" in table_lines(app)[1]
            assert "◀" not in table_lines(app)[1]
            await press_sequence(pilot, ["l"] * 4)
            header = table_lines(app)[1]
            assert "◀" in header
            assert "column_04" in header

    async def test_resize_rebuilds_projection(self):
        async with run_app(make_workspace(make_tab(rows=make_rows(200)))) as (pilot, app):
            await resize_and_settle(pilot, 100, 15)
            table = app._get_table()
            assert table.projection is not None
            assert len(table.projection.screen_rows(table.viewport_height)) == table.viewport_height


class TestNavigation:
    async def test_row_keys(self):
        async with run_app() as (pilot, app):
            tab = app.workspace.active_tab()
            await press_sequence(pilot, ["j", "j", "down"])
            assert tab.selected_row == 3
            await press_and_settle(pilot, "k")
            assert tab.selected_row == 2
            await press_and_settle(pilot, "G")
            assert tab.selected_row == 49
            await press_and_settle(pilot, "g")
            assert tab.selected_row == 0

    async def test_page_keys(self):
        async with run_app() as (pilot, app):
            tab = app.workspace.active_tab()
            await press_and_settle(pilot, "ctrl+d")
            assert tab.selected_row == 10
            await press_and_settle(pilot, "pagedown")
            assert tab.selected_row == 20
            await press_and_settle(pilot, "ctrl+u")
            assert tab.selected_row == 10

    async def test_selected_row_stays_on_screen(self):
        async with run_app(make_workspace(make_tab(rows=make_rows(500))), size=(80, 20)) as (pilot, app):
            await press_sequence(pilot, ["ctrl+d"] * 5)
            assert any(line.startswith("│>> 50 ") for line in table_lines(app))

    async def test_column_keys(self):
        async with run_app() as (pilot, app):
            tab = app.workspace.active_tab()
            await press_sequence(pilot, ["l", "l", "l"])
            assert tab.selected_visible_col == 2
            await press_and_settle(pilot, "h")
            assert tab.selected_visible_col == 1

    async def test_width_hide_show_move_reset(self):
        async with run_app() as (pilot, app):
            tab = app.workspace.active_tab()
            auto = tab.store.widths()[1]
            await press_and_settle(pilot, "l")
            await press_and_settle(pilot, "+")
            assert tab.effective_widths()[1] == auto + 2
            await press_and_settle(pilot, "-")
            await press_and_settle(pilot, "-")
            assert tab.effective_widths()[1] == auto - 2
            await press_and_settle(pilot, ">")
            assert tab.visible_cols() == [0, 2, 1]
            await press_and_settle(pilot, "H")
            assert tab.visible_cols() == [0, 2]
            await press_and_settle(pilot, "S")
            assert tab.visible_cols() == [0, 2, 1]
            await press_and_settle(pilot, "0")
            assert tab.visible_cols() == [0, 1, 2]
            assert tab.effective_widths()[1] == auto

    async def test_hiding_last_column_is_refused(self):
        tab = make_tab(headers=["only"], rows=[["x"]])
        async with run_app(make_workspace(tab)) as (pilot, app):
            await press_and_settle(pilot, "H")
            assert tab.visible_cols() == [0]
            assert "Cannot hide" in app.status_message


class TestFilterPrompt:
    async def test_filter_applies_on_enter(self):
        async with run_app() as (pilot, app):
            tab = app.workspace.active_tab()
            await press_and_settle(pilot, "/")
            assert app.input_mode == InputMode.FILTER_EDIT
            await press_sequence(pilot, ["b", "e", "r"])
            assert prompt_text(app) == "ber"
            # Nothing is applied while typing
            assert tab.filter_text == ""
            await press_and_settle(pilot, "enter")
            assert app.input_mode == InputMode.NORMAL
            assert tab.filter_text == "ber"
            assert tab.displayed_row_count == 10
            assert "(from 50)" in table_lines(app)[0]
            assert "/ber" in table_lines(app)[0]

    async def test_escape_cancels(self):
        async with run_app() as (pilot, app):
            tab = app.workspace.active_tab()
            await press_sequence(pilot, ["/", "x", "escape"])
            assert app.input_mode == InputMode.NORMAL
            assert tab.filter_text == ""
            assert prompt_text(app) == ""

    async def test_backspace_and_clear_filter(self):
        async with run_app() as (pilot, app):
            tab = app.workspace.active_tab()
            await press_sequence(pilot, ["/", "o", "s", "x", "backspace", "enter"])
            assert tab.filter_text == "os"
            # Reopening the prompt starts from the current filter
            await press_and_settle(pilot, "/")
            assert prompt_text(app) == "os"
            await press_sequence(pilot, ["backspace", "backspace", "enter"])
            assert tab.filter_text == ""
            assert tab.displayed_row_count == 50

    async def test_normal_keys_are_text_while_editing(self):
        async with run_app() as (pilot, app):
            tab = app.workspace.active_tab()
            await press_sequence(pilot, ["/", "q", "j", "G"])
            assert app.input_mode == InputMode.FILTER_EDIT
            assert prompt_text(app) == "qjG"
            assert tab.selected_row == 0


class TestExport:
    async def test_csv_export(self, tmp_path):
        config = RuntimeConfig(export_dir=str(tmp_path))
        async with run_app(config=config) as (pilot, app):
            await press_and_settle(pilot, "E")
            assert app.input_mode == InputMode.EXPORT_FORMAT
            await press_and_settle(pilot, "c")
            assert app.input_mode == InputMode.EXPORT_FILENAME
            assert prompt_text(app) == "export.csv"
            await press_and_settle(pilot, "enter")
            assert app.input_mode == InputMode.NORMAL

        content = (tmp_path / "export.csv").read_text(encoding="utf-8")
        assert content.startswith(UTF8_BOM)
        lines = content[len(UTF8_BOM):].splitlines()
        assert lines[0] == "id,name,city"
        assert len(lines) == 51
        assert app.status_message.startswith("Exported to")

    async def test_json_export_honors_hidden_columns_and_filter(self, tmp_path):
        config = RuntimeConfig(export_dir=str(tmp_path))
        async with run_app(config=config) as (pilot, app):
            await press_sequence(pilot, ["/", "t", "u", "n", "i", "s", "enter"])
            await press_sequence(pilot, ["l", "H"])
            await press_sequence(pilot, ["E", "j"])
            assert prompt_text(app) == "export.json"
            await press_sequence(pilot, ["backspace"] * 11 + list("out.json") + ["enter"])

        records = json.loads((tmp_path / "out.json").read_text(encoding="utf-8"))
        assert len(records) == 10
        assert records[0] == {"id": "4", "city": "Tunis"}

    async def test_escape_cancels_format_choice(self):
        async with run_app() as (pilot, app):
            await press_sequence(pilot, ["E", "escape"])
            assert app.input_mode == InputMode.NORMAL

    async def test_write_failure_is_a_status_message(self, tmp_path):
        config = RuntimeConfig(export_dir=str(tmp_path / "does-not-exist"))
        async with run_app(config=config) as (pilot, app):
            await press_sequence(pilot, ["E", "c", "enter"])
            assert "Failed to write file" in app.status_message
            assert "Failed to write file" in footer_text(app)

    async def test_prompt_remembers_last_path_per_format(self, tmp_path):
        config = RuntimeConfig(export_dir=str(tmp_path))
        async with run_app(config=config) as (pilot, app):
            await press_sequence(pilot, ["E", "c"] + ["backspace"] * 10 + list("people.csv") + ["enter"])
            assert (tmp_path / "people.csv").exists()
            await press_sequence(pilot, ["E", "c"])
            assert prompt_text(app) == "people.csv"
            await press_sequence(pilot, ["escape", "E", "j"])
            assert prompt_text(app) == "export.json"

    async def test_failed_export_is_not_remembered(self, tmp_path):
        config = RuntimeConfig(export_dir=str(tmp_path / "does-not-exist"))
        async with run_app(config=config) as (pilot, app):
            await press_sequence(pilot, ["E", "c", "enter", "E", "c"])
            assert prompt_text(app) == "export.csv"


class TestTabs:
    async def test_duplicate_switch_and_close(self):
        async with run_app() as (pilot, app):
            ws = app.workspace
            await press_and_settle(pilot, "D")
            assert ws.tab_count() == 2
            assert ws.active_idx == 1
            assert footer_text(app).startswith("1:data [2:data (copy)]")
            await press_and_settle(pilot, "1")
            assert ws.active_idx == 0
            await press_and_settle(pilot, "tab")
            assert ws.active_idx == 1
            await press_and_settle(pilot, "shift+tab")
            assert ws.active_idx == 0
            await press_and_settle(pilot, "W")
            assert ws.tab_count() == 1
            assert ws.active_tab().name == "data (copy)"

    async def test_last_tab_is_never_closed(self):
        async with run_app() as (pilot, app):
            await press_and_settle(pilot, "W")
            assert app.workspace.tab_count() == 1

    async def test_tabs_keep_independent_state(self):
        ws = make_workspace(make_tab("a"), make_tab("b"))
        async with run_app(ws) as (pilot, app):
            await press_sequence(pilot, ["j", "j", "2", "G", "1"])
            assert ws.tabs[0].selected_row == 2
            assert ws.tabs[1].selected_row == 49
            assert table_lines(app)[0].startswith("┌─ a [Row 3/50")

    async def test_switch_to_missing_tab_is_ignored(self):
        async with run_app() as (pilot, app):
            await press_and_settle(pilot, "5")
            assert app.workspace.active_idx == 0


class TestSplitView:
    def _two_tabs(self):
        return make_workspace(make_tab("a"), make_tab("b"))

    async def test_split_shows_both_panes(self):
        ws = self._two_tabs()
        async with run_app(ws) as (pilot, app):
            assert split_lines(app) == []
            assert "V: split" in footer_text(app)
            await press_and_settle(pilot, "V")
            assert ws.is_split
            assert app._get_table().size.width == app._get_split().size.width == 60
            assert table_lines(app)[0].startswith("┌─ *a [Row 1/50")
            assert split_lines(app)[0].startswith("┌─ b [Row 1/50")
            assert "user0" in split_lines(app)[2]
            assert footer_text(app).startswith("[1:a] <2:b> | Tab: switch pane, V: unsplit")
            await press_and_settle(pilot, "V")
            assert not ws.is_split
            assert split_lines(app) == []
            assert table_lines(app)[0].startswith("┌─ a [Row 1/50")

    async def test_tab_moves_focus_and_keys_follow_it(self):
        ws = self._two_tabs()
        async with run_app(ws) as (pilot, app):
            await press_sequence(pilot, ["V", "tab", "j", "j"])
            assert not ws.focus_left
            assert ws.tabs[0].selected_row == 0
            assert ws.tabs[1].selected_row == 2
            assert split_lines(app)[0].startswith("┌─ *b [Row 3/50")
            assert table_lines(app)[0].startswith("┌─ a [Row 1/50")
            await press_and_settle(pilot, "shift+tab")
            assert ws.focus_left
            assert ws.active_idx == 0

    async def test_duplicate_opens_in_focused_pane(self):
        ws = self._two_tabs()
        async with run_app(ws) as (pilot, app):
            await press_sequence(pilot, ["V", "tab", "D"])
            assert ws.tab_count() == 3
            assert (ws.active_idx, ws.split_idx) == (0, 2)
            assert split_lines(app)[0].startswith("┌─ *b (copy)")
            assert footer_text(app).startswith("[1:a] 2:b <3:b (copy)>")

    async def test_closing_focused_tab_leaves_split(self):
        ws = self._two_tabs()
        async with run_app(ws) as (pilot, app):
            await press_sequence(pilot, ["V", "tab", "W"])
            assert ws.tab_names() == ["a"]
            assert not ws.is_split
            assert split_lines(app) == []

    async def test_split_with_one_tab_is_refused(self):
        async with run_app() as (pilot, app):
            await press_and_settle(pilot, "V")
            assert not app.workspace.is_split
            assert app.status_message == "Split view needs at least two tabs"


class TestStreaming:
    def _stream_app(self, stream, **kwargs):
        ingestor = StreamingIngestor.start(stream, **kwargs)
        tab = Tab("stdin", TabularStore(ingestor.headers), ViewMode.PIPE_DATA)
        return ingestor, tab, make_workspace(tab)

    async def test_rows_stream_into_tab(self):
        stream = io.StringIO(make_psql(["id", "name", "city"], make_rows(3000)))
        ingestor, tab, ws = self._stream_app(stream, batch_size=250)
        config = RuntimeConfig(max_rows_per_tick=1000, tick_interval=0.01)
        async with run_app(ws, ingestor=ingestor, stream_tab=tab, config=config) as (pilot, app):
            assert await settle_until(pilot, lambda: not app.streaming)
            assert tab.total_rows == 3000
            assert app.status_message == "Loaded 3000 rows"
            assert "Loading" not in footer_text(app)
            assert table_lines(app)[2].startswith("│>> 0")

    async def test_navigation_while_loading(self, pipe_stream):
        reader, writer = pipe_stream()
        writer.write(make_psql(["id", "name", "city"], make_rows(20), footer=False))
        ingestor, tab, ws = self._stream_app(reader, batch_size=1)
        config = RuntimeConfig(tick_interval=0.01)
        async with run_app(ws, ingestor=ingestor, stream_tab=tab, config=config) as (pilot, app):
            assert await settle_until(pilot, lambda: tab.total_rows == 20)
            assert app.streaming
            assert "Loading... 20 rows" in footer_text(app)
            assert "(streaming)" in table_lines(app)[0]
            await press_and_settle(pilot, "G")
            assert tab.selected_row == 19
            writer.write(make_psql(["id", "name", "city"], make_rows(5, start=20), footer=False).split("\n", 2)[2])
            writer.close()
            assert await settle_until(pilot, lambda: not app.streaming)
            assert tab.total_rows == 25

    async def test_cancel_loading(self, pipe_stream):
        reader, writer = pipe_stream()
        writer.write(make_psql(["id", "name", "city"], make_rows(5), footer=False))
        ingestor, tab, ws = self._stream_app(reader, batch_size=1)
        config = RuntimeConfig(tick_interval=0.01)
        async with run_app(ws, ingestor=ingestor, stream_tab=tab, config=config) as (pilot, app):
            assert await settle_until(pilot, lambda: tab.total_rows == 5)
            await press_and_settle(pilot, "x")
            assert ingestor.cancelled
            assert "(cancelled)" in footer_text(app)
            writer.write(" 99 | late | row\n")  # wakes the blocked read
            assert await settle_until(pilot, lambda: not app.streaming)
            assert tab.total_rows == 5
            assert app.status_message == "Loading cancelled at 5 rows"

    async def test_unmount_closes_ingestor(self, pipe_stream):
        reader, writer = pipe_stream()
        writer.write(" a\n---\n 1\n")
        ingestor, tab, ws = self._stream_app(reader)
        async with run_app(ws, ingestor=ingestor, stream_tab=tab) as (pilot, app):
            assert app.streaming
        assert ingestor.cancelled
        writer.close()
