"""Horizontal column fitting with overflow indicators.

Layout of one rendered row inside the pane (borders and the row selector are
already subtracted from ``available_width`` by the caller)::

    [◀ ] col_a col_b col_c…[ ▶]

An overflow indicator costs two cells (the glyph plus its separator). The
right indicator is reserved speculatively; if every remaining column turns
out to fit, the greedy pass is re-run once with that space returned.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

INDICATOR_WIDTH = 2
MIN_PARTIAL_WIDTH = 3
FALLBACK_WIDTH = 10


@dataclass(frozen=True)
class FittedColumn:
    index: int  # data column index
    width: int  # effective rendered width
    truncated: bool = False


@dataclass(frozen=True)
class ColumnWindow:
    columns: tuple[FittedColumn, ...]
    has_left_overflow: bool
    has_right_overflow: bool
    scroll_offset: int
    last_visible_position: int

    @property
    def indices(self) -> list[int]:
        return [c.index for c in self.columns]

    def render_position(self, selected_visible_col: int) -> int:
        """Rendered cell position of the selected column.

        Lands on data columns only, never on an indicator cell; shifted by one
        when the left indicator occupies position 0.
        """
        if not self.columns:
            return 0
        pos = max(0, selected_visible_col - self.scroll_offset)
        pos = min(pos, len(self.columns) - 1)
        return pos + 1 if self.has_left_overflow else pos


def _greedy(
    visible_cols: Sequence[int],
    widths: Sequence[int],
    scroll_offset: int,
    space: int,
) -> tuple[list[FittedColumn], int]:
    fitted: list[FittedColumn] = []
    used = 0
    last = scroll_offset
    for pos in range(scroll_offset, len(visible_cols)):
        data_idx = visible_cols[pos]
        col_width = widths[data_idx] if 0 <= data_idx < len(widths) else FALLBACK_WIDTH
        needed = col_width if not fitted else col_width + 1
        if used + needed <= space:
            fitted.append(FittedColumn(data_idx, col_width))
            used += needed
            last = pos
        elif not fitted:
            # Never render zero columns: show the first one cut to the pane.
            fitted.append(FittedColumn(data_idx, max(1, space), truncated=True))
            last = pos
            break
        else:
            remaining = space - (used + 1)
            if remaining >= MIN_PARTIAL_WIDTH:
                fitted.append(FittedColumn(data_idx, remaining, truncated=True))
                last = pos
            break
    return fitted, last


def fit_columns(
    visible_cols: Sequence[int],
    widths: Sequence[int],
    scroll_offset: int,
    available_width: int,
) -> ColumnWindow:
    """Columns that fit in available_width starting at scroll_offset."""
    if not visible_cols:
        return ColumnWindow((), False, False, 0, 0)

    scroll_offset = max(0, min(scroll_offset, len(visible_cols) - 1))
    has_left = scroll_offset > 0
    space = max(0, available_width - (INDICATOR_WIDTH if has_left else 0))
    space_with_right = max(0, space - INDICATOR_WIDTH)

    fitted, last = _greedy(visible_cols, widths, scroll_offset, space_with_right)
    has_right = last + 1 < len(visible_cols)

    if not has_right and space > space_with_right:
        fitted, last = _greedy(visible_cols, widths, scroll_offset, space)
        has_right = last + 1 < len(visible_cols)

    return ColumnWindow(
        columns=tuple(fitted),
        has_left_overflow=has_left,
        has_right_overflow=has_right,
        scroll_offset=scroll_offset,
        last_visible_position=last,
    )
