"""Tabs and the workspace that holds them.

A Tab is one dataset (TabularStore) plus its cursor, filter and column state.
Every navigation command is a plain state transition on the tab; the TUI maps
keys to these methods and applies them at a single point per key event.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from table_explorer.core.column_config import ColumnConfig
from table_explorer.core.filtering import FilterView
from table_explorer.core.table_store import TabularStore

PAGE_ROWS = 10
WIDTH_STEP = 2
TAB_NAME_MAX = 15


class ViewMode(Enum):
    PIPE_DATA = "pipe"
    STATIC = "static"


class Tab:
    """A single dataset and its display state."""

    def __init__(self, name: str, store: TabularStore, view_mode: ViewMode = ViewMode.STATIC) -> None:
        self.name = name
        self.store = store
        self.view_mode = view_mode
        self.column_config = ColumnConfig(store.column_count)
        self.filter_view = FilterView(store)
        self.selected_row: int | None = 0 if store.row_count else None
        # Absolute (filtered) index of the first row drawn on screen.
        self.row_offset = 0
        self.selected_visible_col = 0
        self.scroll_col_offset = 0
        # Rightmost visible-column position rendered in the previous frame.
        self.last_visible_col = 0

    # ─── Data ────────────────────────────────────────────────────────────

    @property
    def filter_text(self) -> str:
        return self.filter_view.text

    @property
    def total_rows(self) -> int:
        return self.store.row_count

    @property
    def displayed_row_count(self) -> int:
        return len(self.filter_view)

    def visible_cols(self) -> list[int]:
        return self.column_config.visible_indices()

    def effective_widths(self) -> list[int]:
        return self.column_config.effective_widths(self.store.widths())

    def append_rows(self, rows: Sequence[Sequence[str]]) -> int:
        added = self.store.append_rows(rows)
        if self.selected_row is None and added:
            self.selected_row = 0
        return added

    def replace_data(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        self.store.replace(headers, rows)
        self.column_config = ColumnConfig(self.store.column_count)
        self.filter_view.rebind(self.store)
        self.filter_view.set_filter("")
        self.selected_row = 0 if self.store.row_count else None
        self.row_offset = 0
        self.selected_visible_col = 0
        self.scroll_col_offset = 0
        self.last_visible_col = 0

    def duplicate(self, name: str) -> Tab:
        """Independent copy of this tab (fresh interner, same view state)."""
        dup = Tab(name, self.store.clone(), self.view_mode)
        dup.column_config = self.column_config.copy()
        dup.filter_view.set_filter(self.filter_text)
        dup.selected_row = self.selected_row
        dup.row_offset = self.row_offset
        dup.selected_visible_col = self.selected_visible_col
        dup.scroll_col_offset = self.scroll_col_offset
        dup.last_visible_col = self.last_visible_col
        return dup

    def resolved_rows(self) -> list[list[str]]:
        """Filtered rows as plain strings, in display order (for export)."""
        indices = self.filter_view.row_indices(0, self.displayed_row_count)
        return self.store.resolve_rows(indices)

    # ─── Rows ────────────────────────────────────────────────────────────

    def move_row(self, delta: int) -> None:
        count = self.displayed_row_count
        if self.selected_row is None or count == 0:
            return
        self.selected_row = max(0, min(count - 1, self.selected_row + delta))

    def go_top(self) -> None:
        if self.displayed_row_count:
            self.selected_row = 0

    def go_bottom(self) -> None:
        count = self.displayed_row_count
        if count:
            self.selected_row = count - 1

    def apply_filter(self, text: str) -> None:
        self.filter_view.set_filter(text)
        self.selected_row = 0
        self.row_offset = 0
        self.clamp_selection()

    def clamp_selection(self) -> None:
        """Pull the selection back onto the last valid row (None when empty)."""
        count = self.displayed_row_count
        if count == 0:
            self.selected_row = None
        elif self.selected_row is None:
            self.selected_row = 0
        elif self.selected_row >= count:
            self.selected_row = count - 1

    # ─── Columns ─────────────────────────────────────────────────────────

    def move_col(self, delta: int) -> None:
        visible = len(self.visible_cols())
        if visible == 0:
            return
        self.selected_visible_col = max(0, min(visible - 1, self.selected_visible_col + delta))
        if self.selected_visible_col < self.scroll_col_offset:
            self.scroll_col_offset = self.selected_visible_col

    def clamp_columns(self) -> None:
        """Per-frame column clamps, run before the projection is built.

        Only the left edge is handled here. Whether the selected column fits
        on the right depends on the pane width, so build_projection checks it
        after fitting.
        """
        visible = len(self.visible_cols())
        if visible == 0:
            self.selected_visible_col = 0
            self.scroll_col_offset = 0
            return
        self.selected_visible_col = min(self.selected_visible_col, visible - 1)
        self.scroll_col_offset = min(self.scroll_col_offset, visible - 1)
        if self.selected_visible_col < self.scroll_col_offset:
            self.scroll_col_offset = self.selected_visible_col

    def _selected_data_col(self) -> int | None:
        visible = self.visible_cols()
        if 0 <= self.selected_visible_col < len(visible):
            return visible[self.selected_visible_col]
        return None

    def adjust_selected_width(self, delta: int) -> None:
        col = self._selected_data_col()
        if col is None:
            return
        auto = self.store.widths()
        self.column_config.adjust_width(col, delta, auto[col] if col < len(auto) else 10)

    def hide_selected_column(self) -> bool:
        """Hide the selected column; the last visible column is never hidden."""
        if self.column_config.visible_count() <= 1:
            return False
        col = self._selected_data_col()
        if col is None:
            return False
        self.column_config.hide(col)
        remaining = self.column_config.visible_count()
        if self.selected_visible_col >= remaining and self.selected_visible_col > 0:
            self.selected_visible_col -= 1
        return True

    def show_all_columns(self) -> None:
        self.column_config.show_all()

    def reset_columns(self) -> None:
        self.column_config.reset()
        self.scroll_col_offset = 0
        self.selected_visible_col = 0

    def move_column(self, delta: int) -> None:
        """Swap the selected column with its neighbour; selection follows it."""
        visible = self.visible_cols()
        pos = self.selected_visible_col
        target = pos + delta
        if not (0 <= pos < len(visible) and 0 <= target < len(visible)):
            return
        cfg = self.column_config
        this_pos = cfg.display_position(visible[pos])
        other_pos = cfg.display_position(visible[target])
        if this_pos is None or other_pos is None:
            return
        cfg.swap_display(this_pos, other_pos)
        self.selected_visible_col = target
        if self.selected_visible_col < self.scroll_col_offset:
            self.scroll_col_offset = self.selected_visible_col


def short_name(name: str) -> str:
    if len(name) > TAB_NAME_MAX:
        return f"{name[:12]}..."
    return name


class Workspace:
    """Ordered tabs, the active index and the optional split pane.

    In split mode the left pane shows ``active_idx`` and the right pane
    ``split_idx``; tab switching applies to whichever pane has focus.
    """

    def __init__(self) -> None:
        self.tabs: list[Tab] = []
        self.active_idx = 0
        self.split_active = False
        self.split_idx = 0
        self.focus_left = True

    def add_tab(self, tab: Tab) -> int:
        self.tabs.append(tab)
        return len(self.tabs) - 1

    def active_tab(self) -> Tab | None:
        if 0 <= self.active_idx < len(self.tabs):
            return self.tabs[self.active_idx]
        return None

    # ─── Split view ──────────────────────────────────────────────────────

    @property
    def is_split(self) -> bool:
        return self.split_active and len(self.tabs) > 1

    def split_tab(self) -> Tab | None:
        if self.is_split and 0 <= self.split_idx < len(self.tabs):
            return self.tabs[self.split_idx]
        return None

    def toggle_split(self) -> bool:
        """Open the tab after the active one in a right pane, or close the split."""
        if self.split_active:
            self.split_active = False
            self.focus_left = True
        elif len(self.tabs) > 1:
            self.split_active = True
            self.split_idx = (self.active_idx + 1) % len(self.tabs)
            self.focus_left = True
        return self.split_active

    def toggle_focus(self) -> None:
        if self.is_split:
            self.focus_left = not self.focus_left

    def focused_idx(self) -> int:
        if self.is_split and not self.focus_left:
            return self.split_idx
        return self.active_idx

    def focused_tab(self) -> Tab | None:
        idx = self.focused_idx()
        if 0 <= idx < len(self.tabs):
            return self.tabs[idx]
        return None

    def _set_focused_idx(self, idx: int) -> None:
        if self.is_split and not self.focus_left:
            self.split_idx = idx
        else:
            self.active_idx = idx

    # ─── Tab list ────────────────────────────────────────────────────────

    def switch_to(self, idx: int) -> None:
        if self.tabs:
            self._set_focused_idx(max(0, min(idx, len(self.tabs) - 1)))

    def next_tab(self) -> None:
        if self.tabs:
            self._set_focused_idx((self.focused_idx() + 1) % len(self.tabs))

    def prev_tab(self) -> None:
        if self.tabs:
            self._set_focused_idx((self.focused_idx() - 1) % len(self.tabs))

    def close_tab(self, idx: int) -> Tab | None:
        if not 0 <= idx < len(self.tabs):
            return None
        closed = self.tabs.pop(idx)
        self.active_idx = _index_after_close(self.active_idx, idx, len(self.tabs))
        self.split_idx = _index_after_close(self.split_idx, idx, len(self.tabs))
        if len(self.tabs) < 2 or self.split_idx == self.active_idx:
            self.split_active = False
            self.focus_left = True
        return closed

    def tab_count(self) -> int:
        return len(self.tabs)

    def tab_names(self) -> list[str]:
        return [t.name for t in self.tabs]

    def tab_bar(self) -> str:
        """``1:name [2:active] <3:split>``, empty with a single tab."""
        if len(self.tabs) <= 1:
            return ""
        split_idx = self.split_idx if self.is_split else None
        parts = []
        for i, tab in enumerate(self.tabs):
            label = f"{i + 1}:{short_name(tab.name)}"
            if i == self.active_idx:
                label = f"[{label}]"
            elif i == split_idx:
                label = f"<{label}>"
            parts.append(label)
        return " ".join(parts)


def _index_after_close(current: int, closed: int, remaining: int) -> int:
    """Where an index lands once the tab at ``closed`` is removed."""
    if remaining == 0:
        return 0
    if closed < current:
        current -= 1
    return min(current, remaining - 1)
