"""Incremental per-column display width cache.

Column auto-sizing must reflect rows that stream in later (a late row may be
the widest), but rescanning every stored row each frame is the dominant cost
at scale. The cache is therefore only ever fed the suffix of newly appended
rows; a full rescan happens on wholesale replace only.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from rich.cells import cell_len

# One trailing cell of breathing room per column.
PADDING = 1


def display_width(text: str) -> int:
    """Terminal cell width of text (wide glyphs count as two)."""
    return cell_len(text)


class IncrementalWidthCache:
    """Per-column max(display width) + PADDING over header and all rows seen."""

    def __init__(self, headers: Sequence[str] = ()) -> None:
        self._widths: list[int] = [display_width(h) + PADDING for h in headers]

    @property
    def column_count(self) -> int:
        return len(self._widths)

    def update(self, rows: Iterable[Sequence[str]]) -> None:
        """Fold new rows into the cache. O(new rows x columns)."""
        widths = self._widths
        ncols = len(widths)
        for row in rows:
            # Short rows only touch the columns they have; extra cells are ignored.
            for i, cell in enumerate(row[:ncols]):
                w = display_width(cell) + PADDING
                if w > widths[i]:
                    widths[i] = w

    def rebuild(self, headers: Sequence[str], rows: Iterable[Sequence[str]]) -> None:
        """Full rescan, only for wholesale replacement of the row set."""
        self._widths = [display_width(h) + PADDING for h in headers]
        self.update(rows)

    def widths(self) -> list[int]:
        return list(self._widths)

    def width(self, col: int, default: int = 10) -> int:
        if 0 <= col < len(self._widths):
            return self._widths[col]
        return default
