"""Bordered table pane rendered through the Line API.

One RenderProjection is built per rebuild (state change or resize); every
render_line() call reads from it, so a frame never touches rows outside the
row window.

Pane layout (height h)::

    y = 0        ┌─ title ───────────┐
    y = 1        │   header header   │
    y = 2..h-2   │>> cell   cell     │
    y = h-1      └───────────────────┘
"""

from __future__ import annotations

from rich.cells import set_cell_size
from rich.segment import Segment
from rich.style import Style
from textual.strip import Strip
from textual.widget import Widget

from table_explorer.app.workspace import Tab
from table_explorer.core.column_window import ColumnWindow
from table_explorer.core.projection import CHROME_WIDTH, SELECTOR, RenderProjection, build_projection, pane_title
from table_explorer.core.width_cache import display_width

# Top border, header row, bottom border.
CHROME_HEIGHT = 3

LEFT_INDICATOR = "◀ "
RIGHT_INDICATOR = " ▶"
ELLIPSIS = "…"

BORDER_STYLE = Style(color="bright_black")
TITLE_STYLE = Style(bold=True)
HEADER_STYLE = Style(bold=True, color="yellow")
SELECTED_HEADER_STYLE = Style(bold=True, color="yellow", reverse=True)
SELECTED_ROW_STYLE = Style(bold=True, bgcolor="grey23")
SELECTED_CELL_STYLE = Style(bold=True, reverse=True)
INDICATOR_STYLE = Style(color="cyan", bold=True)


def fit_cell(text: str, width: int) -> str:
    """Pad or cut text to exactly width cells; cut text ends in an ellipsis."""
    if width <= 0:
        return ""
    if display_width(text) <= width:
        return set_cell_size(text, width)
    return set_cell_size(text, width - 1) + ELLIPSIS


def _row_segments(
    cells: list[str] | tuple[str, ...],
    col_window: ColumnWindow,
    selected_slot: int | None,
    cell_style: Style | None,
    selected_style: Style | None,
) -> list[Segment]:
    segments: list[Segment] = []
    if col_window.has_left_overflow:
        segments.append(Segment(LEFT_INDICATOR, INDICATOR_STYLE))
    for slot, col in enumerate(col_window.columns):
        if slot:
            segments.append(Segment(" ", cell_style))
        text = cells[col.index] if col.index < len(cells) else ""
        style = selected_style if slot == selected_slot else cell_style
        segments.append(Segment(fit_cell(text, col.width), style))
    if col_window.has_right_overflow:
        segments.append(Segment(RIGHT_INDICATOR, INDICATOR_STYLE))
    return segments


class TableView(Widget):
    """Windowed table pane for one tab.

    // [LAW:single-enforcer] rebuild() is the only place a projection is built.
    """

    DEFAULT_CSS = """
    TableView {
        height: 1fr;
        width: 1fr;
    }
    """

    def __init__(self, *, id: str | None = None) -> None:
        super().__init__(id=id)
        self._tab: Tab | None = None
        self._loading = ""
        self._marked = False
        self._projection: RenderProjection | None = None
        self._screen_rows: list[tuple[int, list[str]]] = []

    @property
    def projection(self) -> RenderProjection | None:
        return self._projection

    @property
    def viewport_height(self) -> int:
        return max(1, self.size.height - CHROME_HEIGHT)

    @property
    def available_width(self) -> int:
        return max(0, self.size.width - CHROME_WIDTH)

    def show(self, tab: Tab | None, *, loading: str = "", marked: bool = False) -> None:
        """Display tab; marked panes (the focused half of a split) get a ``*`` title."""
        self._tab = tab
        self._loading = loading
        self._marked = marked
        self.rebuild()

    def rebuild(self) -> None:
        tab = self._tab
        if tab is None or not self.size.width:
            self._projection = None
            self._screen_rows = []
        else:
            self._projection = build_projection(tab, self.viewport_height, self.available_width)
            self._screen_rows = self._projection.screen_rows(self.viewport_height)
        self.refresh()

    def on_resize(self, event) -> None:
        self.rebuild()

    # ─── Line API ────────────────────────────────────────────────────────

    def render_line(self, y: int) -> Strip:
        width = self.size.width
        height = self.size.height
        p = self._projection
        if p is None or width < 2:
            return Strip.blank(width, self.rich_style)

        if y == 0:
            strip = self._top_border(p, width)
        elif y == height - 1:
            strip = Strip([Segment("└" + "─" * (width - 2) + "┘", BORDER_STYLE)])
        elif y == 1:
            strip = self._framed(self._header_segments(p), width)
        else:
            idx = y - 2
            if idx < len(self._screen_rows):
                strip = self._framed(self._data_segments(p, *self._screen_rows[idx]), width)
            else:
                strip = self._framed([], width)
        return strip.apply_style(self.rich_style)

    def _top_border(self, p: RenderProjection, width: int) -> Strip:
        title = pane_title(p, loading=self._loading)
        if self._marked:
            title = f"*{title}"
        room = width - 4
        label = f" {fit_cell(title, room - 2).rstrip()} " if room > 2 else ""
        fill = max(0, width - 3 - display_width(label))
        return Strip(
            [
                Segment("┌─", BORDER_STYLE),
                Segment(label, TITLE_STYLE),
                Segment("─" * fill + "┐", BORDER_STYLE),
            ]
        ).adjust_cell_length(width)

    def _framed(self, inner: list[Segment], width: int) -> Strip:
        body = Strip(inner).adjust_cell_length(width - 2)
        return Strip([Segment("│", BORDER_STYLE), *body, Segment("│", BORDER_STYLE)])

    def _selected_slot(self, p: RenderProjection) -> int | None:
        if not p.column_window.columns:
            return None
        return p.render_col_position - (1 if p.column_window.has_left_overflow else 0)

    def _header_segments(self, p: RenderProjection) -> list[Segment]:
        segments = [Segment(" " * len(SELECTOR))]
        segments.extend(
            _row_segments(p.headers, p.column_window, self._selected_slot(p), HEADER_STYLE, SELECTED_HEADER_STYLE)
        )
        return segments

    def _data_segments(self, p: RenderProjection, absolute: int, cells: list[str]) -> list[Segment]:
        if absolute == p.selected_row:
            segments = [Segment(SELECTOR, SELECTED_ROW_STYLE)]
            segments.extend(
                _row_segments(cells, p.column_window, self._selected_slot(p), SELECTED_ROW_STYLE, SELECTED_CELL_STYLE)
            )
            return segments
        segments = [Segment(" " * len(SELECTOR))]
        segments.extend(_row_segments(cells, p.column_window, None, None, None))
        return segments
