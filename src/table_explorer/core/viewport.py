"""Vertical row windowing.

Only rows in a buffer of 2 x viewport height on either side of the cursor are
materialized per frame, so frame cost is independent of the dataset size.
"""

from __future__ import annotations

from dataclasses import dataclass

BUFFER_FACTOR = 2


@dataclass(frozen=True)
class RowWindow:
    """Half-open range [start, end) of absolute (filtered) row positions."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def __contains__(self, absolute: object) -> bool:
        return isinstance(absolute, int) and self.start <= absolute < self.end

    def to_relative(self, absolute: int | None) -> int | None:
        """Window-relative index for the cursor widget; None outside the window."""
        if absolute is None or absolute not in self:
            return None
        return absolute - self.start

    def to_absolute(self, relative: int) -> int:
        return relative + self.start


def viewport_window(selected: int | None, viewport_height: int, row_count: int) -> RowWindow:
    """Row range to materialize around the selected row.

    Never raises: an empty row set or a selection past the end (filter just
    shrank) yields an empty window.
    """
    buffer = BUFFER_FACTOR * max(1, viewport_height)
    k = max(0, selected or 0)
    start = max(0, k - buffer)
    end = min(row_count, k + buffer)
    if start > end:
        start = end
    return RowWindow(start, end)


def scroll_top(relative_selected: int | None, viewport_height: int, previous_top: int, window_len: int) -> int:
    """First window-relative row to draw so the cursor stays on screen.

    Mirrors a stateful table widget: keep the previous offset while the cursor
    is visible, otherwise scroll just enough to bring it into view.
    """
    height = max(1, viewport_height)
    top = max(0, min(previous_top, max(0, window_len - height)))
    if relative_selected is None:
        return top
    if relative_selected < top:
        top = relative_selected
    elif relative_selected >= top + height:
        top = relative_selected - height + 1
    return max(0, top)
