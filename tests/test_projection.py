"""Tests for the per-frame render projection."""

from table_explorer.core.projection import CHROME_WIDTH, build_projection, pane_title

from tests.harness.builders import make_rows, make_tab


def _wide_tab(ncols=10, nrows=5):
    headers = [f"column_{i:02d}" for i in range(ncols)]  # 9 chars + padding = 10
    rows = [[f"v{r}_{c}" for c in range(ncols)] for r in range(nrows)]
    return make_tab("wide", headers, rows)


class TestRows:
    def test_initial_frame(self):
        tab = make_tab(rows=make_rows(100))
        p = build_projection(tab, 10, 80)
        assert (p.window.start, p.window.end) == (0, 20)
        assert len(p.rows) == 20
        assert p.selected_row == 0
        assert p.relative_selected_row == 0
        assert p.row_offset == 0
        screen = p.screen_rows(10)
        assert [idx for idx, _ in screen] == list(range(10))
        assert screen[0][1] == ["0", "user0", "Berlin"]

    def test_cursor_below_screen_scrolls_just_enough(self):
        tab = make_tab(rows=make_rows(100))
        build_projection(tab, 10, 80)
        tab.selected_row = 50
        p = build_projection(tab, 10, 80)
        assert (p.window.start, p.window.end) == (30, 70)
        assert p.row_offset == 41
        assert [idx for idx, _ in p.screen_rows(10)][-1] == 50

    def test_offset_is_stable_while_cursor_on_screen(self):
        tab = make_tab(rows=make_rows(100))
        tab.selected_row = 50
        build_projection(tab, 10, 80)
        tab.selected_row = 45
        p = build_projection(tab, 10, 80)
        assert p.row_offset == 41

    def test_selection_is_clamped_after_filter_shrinks(self):
        tab = make_tab(rows=make_rows(100))
        tab.selected_row = 90
        tab.filter_view.set_filter("Berlin")
        p = build_projection(tab, 10, 80)
        assert p.displayed_row_count == 20
        assert p.selected_row == 19

    def test_filtered_rows_are_resolved_through_the_filter(self):
        tab = make_tab(rows=make_rows(100))
        tab.apply_filter("osaka")
        p = build_projection(tab, 10, 80)
        assert all(row[2] == "Osaka" for row in p.rows)
        assert p.rows[0][0] == "2"

    def test_empty_table(self):
        tab = make_tab(rows=[])
        p = build_projection(tab, 10, 80)
        assert p.selected_row is None
        assert p.rows == []
        assert p.screen_rows(10) == []

    def test_frame_cost_is_bounded_for_large_data(self):
        tab = make_tab(rows=make_rows(200_000))
        tab.selected_row = 123_456
        p = build_projection(tab, 40, 80)
        assert len(p.rows) <= 4 * 40
        assert p.relative_selected_row is not None


class TestColumns:
    def test_records_last_visible_column(self):
        tab = _wide_tab()
        build_projection(tab, 5, 30)
        assert tab.last_visible_col == 2

    def test_cursor_past_last_visible_scrolls_right(self):
        tab = _wide_tab()
        build_projection(tab, 5, 30)
        for _ in range(3):
            tab.move_col(1)
        p = build_projection(tab, 5, 30)
        assert tab.scroll_col_offset == 3
        assert p.column_window.has_left_overflow
        assert p.column_window.indices[0] == 3
        assert p.render_col_position == 1

    def test_cursor_left_of_scroll_scrolls_back(self):
        tab = _wide_tab()
        tab.selected_visible_col = 5
        tab.last_visible_col = 0
        build_projection(tab, 5, 30)
        tab.move_col(-5)
        p = build_projection(tab, 5, 30)
        assert p.column_window.scroll_offset == 0
        assert not p.column_window.has_left_overflow

    def test_narrowed_pane_keeps_selected_column_rendered(self):
        tab = _wide_tab(ncols=4)
        build_projection(tab, 10, 200)
        tab.move_col(2)
        build_projection(tab, 10, 200)
        assert tab.last_visible_col == 3

        p = build_projection(tab, 10, 20)
        assert 2 in p.column_window.indices
        assert tab.scroll_col_offset == 2
        slot = p.render_col_position - (1 if p.column_window.has_left_overflow else 0)
        assert p.column_window.columns[slot].index == 2
        assert tab.last_visible_col >= 2

    def test_hidden_columns_are_counted(self):
        tab = _wide_tab(ncols=4)
        tab.hide_selected_column()
        p = build_projection(tab, 5, 200)
        assert p.visible_count == 3
        assert p.hidden_count == 1
        assert 0 not in p.column_window.indices


class TestPaneTitle:
    def test_plain(self):
        p = build_projection(make_tab("users", rows=make_rows(100)), 10, 80)
        assert pane_title(p) == "users [Row 1/100 C1/3]"

    def test_filtered_with_hidden_and_loading(self):
        tab = make_tab("users", rows=make_rows(100))
        tab.apply_filter("Berlin")
        tab.hide_selected_column()
        p = build_projection(tab, 10, 80)
        assert pane_title(p, loading="(streaming)") == (
            "users [Row 1/20 (from 100) C1/2 (1 hid)] /Berlin (streaming)"
        )

    def test_no_rows(self):
        p = build_projection(make_tab("empty", rows=[]), 10, 80)
        assert pane_title(p) == "empty"


def test_chrome_width_covers_borders_and_selector():
    assert CHROME_WIDTH == 5
