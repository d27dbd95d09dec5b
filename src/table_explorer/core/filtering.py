"""Incremental text filter over a TabularStore.

A row matches when any of its cells contains the filter text, compared
case-insensitively. Matching is evaluated per distinct interned string, so a
value repeated across many rows is lowered and searched once.
"""

from __future__ import annotations

from collections.abc import Sequence

from table_explorer.core.table_store import TabularStore


def row_matches(cells: Sequence[str], needle_lower: str) -> bool:
    return any(needle_lower in cell.lower() for cell in cells)


class FilterView:
    """Filtered row-index sequence that keeps up with appended rows.

    With an empty filter the view is the identity over all rows and no index
    list is materialized. Otherwise only rows appended since the last sync are
    scanned; a filter change or a store swap forces a full rescan.
    """

    def __init__(self, store: TabularStore, text: str = "") -> None:
        self._store = store
        self._text = ""
        self._needle = ""
        self._matches: list[int] = []
        self._scanned = 0
        # handle -> matched? cache, scoped to one store generation + needle
        self._handle_hits: dict[int, bool] = {}
        self.set_filter(text)

    @property
    def text(self) -> str:
        return self._text

    @property
    def active(self) -> bool:
        return bool(self._needle)

    def set_filter(self, text: str) -> None:
        text = text.strip()
        if text == self._text:
            return
        self._text = text
        self._needle = text.lower()
        self.invalidate()

    def rebind(self, store: TabularStore) -> None:
        """Point at a different (or wholesale-replaced) store."""
        self._store = store
        self.invalidate()

    def invalidate(self) -> None:
        self._matches = []
        self._scanned = 0
        self._handle_hits = {}

    def sync(self) -> None:
        """Scan rows appended since the previous sync."""
        if not self._needle:
            return
        store = self._store
        total = store.row_count
        if self._scanned > total:
            # Store shrank underneath us (replace without rebind).
            self.invalidate()
        hits = self._handle_hits
        needle = self._needle
        resolve = store.resolve
        for idx in range(self._scanned, total):
            for handle in store.handle_row(idx):
                hit = hits.get(handle)
                if hit is None:
                    hit = needle in resolve(handle).lower()
                    hits[handle] = hit
                if hit:
                    self._matches.append(idx)
                    break
        self._scanned = total

    def __len__(self) -> int:
        if not self._needle:
            return self._store.row_count
        self.sync()
        return len(self._matches)

    def row_index(self, position: int) -> int:
        """Store row index of the position-th filtered row."""
        if not self._needle:
            return position
        self.sync()
        return self._matches[position]

    def row_indices(self, start: int, end: int) -> list[int]:
        """Store row indices for filtered positions [start, end)."""
        if not self._needle:
            end = min(end, self._store.row_count)
            return list(range(start, max(start, end)))
        self.sync()
        return self._matches[start:end]
