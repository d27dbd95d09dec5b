"""Per-tab column display configuration: visibility, order, width overrides."""

from __future__ import annotations

from dataclasses import dataclass

MIN_WIDTH = 3
MAX_WIDTH = 100


@dataclass
class ColumnState:
    width_override: int | None = None
    visible: bool = True


class ColumnConfig:
    """Visibility, display order and width overrides for n columns.

    Out-of-range column indices are ignored rather than raising; key handlers
    can fire against a column that was hidden in the same frame.
    """

    def __init__(self, num_columns: int) -> None:
        self._columns = [ColumnState() for _ in range(num_columns)]
        self._display_order = list(range(num_columns))

    def __len__(self) -> int:
        return len(self._columns)

    def reset(self) -> None:
        """Auto width for every column, all visible, original order."""
        for col in self._columns:
            col.width_override = None
            col.visible = True
        self._display_order = list(range(len(self._columns)))

    def hide(self, col: int) -> None:
        if 0 <= col < len(self._columns):
            self._columns[col].visible = False

    def show_all(self) -> None:
        for col in self._columns:
            col.visible = True

    def visible_count(self) -> int:
        return sum(1 for c in self._columns if c.visible)

    def visible_indices(self) -> list[int]:
        """Visible column indices in display order."""
        return [i for i in self._display_order if self._columns[i].visible]

    def is_visible(self, col: int) -> bool:
        return 0 <= col < len(self._columns) and self._columns[col].visible

    def get_width(self, col: int) -> int | None:
        if 0 <= col < len(self._columns):
            return self._columns[col].width_override
        return None

    def adjust_width(self, col: int, delta: int, auto_width: int) -> None:
        """Nudge a column's width; starts from auto_width when not overridden."""
        if not 0 <= col < len(self._columns):
            return
        column = self._columns[col]
        current = column.width_override if column.width_override is not None else auto_width
        column.width_override = max(MIN_WIDTH, min(MAX_WIDTH, current + delta))

    def display_position(self, col: int) -> int | None:
        try:
            return self._display_order.index(col)
        except ValueError:
            return None

    def swap_display(self, pos1: int, pos2: int) -> None:
        order = self._display_order
        if 0 <= pos1 < len(order) and 0 <= pos2 < len(order):
            order[pos1], order[pos2] = order[pos2], order[pos1]

    def effective_widths(self, auto_widths: list[int]) -> list[int]:
        """Override where set, otherwise the auto (cached) width."""
        widths: list[int] = []
        for i, col in enumerate(self._columns):
            if col.width_override is not None:
                widths.append(col.width_override)
            elif i < len(auto_widths):
                widths.append(auto_widths[i])
            else:
                widths.append(10)
        return widths

    def copy(self) -> ColumnConfig:
        dup = ColumnConfig(0)
        dup._columns = [ColumnState(c.width_override, c.visible) for c in self._columns]
        dup._display_order = list(self._display_order)
        return dup
