"""Per-frame render projection.

Combines the filter view, the row window around the cursor, effective column
widths and the fitted column window into exactly what one frame draws. Cost
is bounded by the window size, not by the dataset size.

// [LAW:single-enforcer] build_projection() is the only place cursor state is
// translated between absolute and window-relative coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from table_explorer.core.column_window import ColumnWindow, fit_columns
from table_explorer.core.viewport import RowWindow, scroll_top, viewport_window

if TYPE_CHECKING:
    from table_explorer.app.workspace import Tab

# Pane chrome: two border cells plus the ">> " row selector.
BORDER_WIDTH = 2
SELECTOR = ">> "
CHROME_WIDTH = BORDER_WIDTH + len(SELECTOR)


@dataclass(frozen=True)
class RenderProjection:
    name: str
    headers: tuple[str, ...]
    rows: list[list[str]]  # resolved rows for window.start .. window.end
    window: RowWindow
    column_window: ColumnWindow
    total_rows: int
    displayed_row_count: int
    selected_row: int | None
    relative_selected_row: int | None
    row_offset: int  # absolute index of the first row on screen
    selected_visible_col: int
    render_col_position: int
    visible_count: int
    hidden_count: int
    filter_text: str

    def screen_rows(self, viewport_height: int) -> list[tuple[int, list[str]]]:
        """(absolute index, cells) for the rows that land on screen."""
        first = self.row_offset - self.window.start
        out = []
        for rel in range(first, min(len(self.rows), first + max(0, viewport_height))):
            out.append((self.window.start + rel, self.rows[rel]))
        return out


def build_projection(tab: Tab, viewport_height: int, available_width: int) -> RenderProjection:
    """Build the frame data for tab; updates the tab's scroll bookkeeping."""
    tab.clamp_selection()
    tab.clamp_columns()

    displayed = tab.displayed_row_count
    window = viewport_window(tab.selected_row, viewport_height, displayed)
    indices = tab.filter_view.row_indices(window.start, window.end)
    rows = tab.store.resolve_rows(indices)

    # Absolute → relative, let the cursor logic run, relative → absolute.
    relative_selected = window.to_relative(tab.selected_row)
    previous_top = max(0, tab.row_offset - window.start)
    top = scroll_top(relative_selected, viewport_height, previous_top, len(window))
    tab.row_offset = window.to_absolute(top)

    visible = tab.visible_cols()
    widths = tab.effective_widths()
    col_window = fit_columns(visible, widths, tab.scroll_col_offset, available_width)
    if col_window.columns and tab.selected_visible_col > col_window.last_visible_position:
        # The pane shrank (or widths grew) since the last frame: bring the
        # selected column back as the leftmost one.
        col_window = fit_columns(visible, widths, tab.selected_visible_col, available_width)
    tab.scroll_col_offset = col_window.scroll_offset
    tab.last_visible_col = col_window.last_visible_position

    return RenderProjection(
        name=tab.name,
        headers=tab.store.headers,
        rows=rows,
        window=window,
        column_window=col_window,
        total_rows=tab.total_rows,
        displayed_row_count=displayed,
        selected_row=tab.selected_row,
        relative_selected_row=relative_selected,
        row_offset=tab.row_offset,
        selected_visible_col=tab.selected_visible_col,
        render_col_position=col_window.render_position(tab.selected_visible_col),
        visible_count=len(visible),
        hidden_count=tab.store.column_count - len(visible),
        filter_text=tab.filter_text,
    )


def pane_title(projection: RenderProjection, *, loading: str = "") -> str:
    """``name [Row r/n (from N) C c/v (k hid)] /filter`` status title."""
    p = projection
    row_info = ""
    if p.selected_row is not None:
        if p.filter_text:
            row_info = f"Row {p.selected_row + 1}/{p.displayed_row_count} (from {p.total_rows})"
        else:
            row_info = f"Row {p.selected_row + 1}/{p.total_rows}"
    col_info = ""
    if p.visible_count:
        hidden = f" ({p.hidden_count} hid)" if p.hidden_count else ""
        col_info = f" C{p.selected_visible_col + 1}/{p.visible_count}{hidden}"
    position = f" [{row_info}{col_info}]" if row_info else ""
    filter_info = f" /{p.filter_text}" if p.filter_text else ""
    suffix = f" {loading}" if loading else ""
    return f"{p.name}{position}{filter_info}{suffix}"
