"""Interned tabular storage for a single tab's dataset.

Rows are stored as lists of interner handles. The store owns its Interner and
its IncrementalWidthCache; both live and die with the store.

// [LAW:single-enforcer] append_rows() is the only path that grows the row set,
// and the only place the width cache sees new rows.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Iterator, Sequence

from table_explorer.core.interner import Interner
from table_explorer.core.parser import TableData
from table_explorer.core.width_cache import IncrementalWidthCache


class TabularStore:
    """headers + rows-of-handles + the Interner that resolves them."""

    def __init__(self, headers: Sequence[str], rows: Iterable[Sequence[str]] = ()) -> None:
        self._headers: tuple[str, ...] = tuple(headers)
        self._interner = Interner()
        self._rows: list[list[int]] = []
        self._widths = IncrementalWidthCache(self._headers)
        self.append_rows(rows)

    @classmethod
    def from_table(cls, data: TableData) -> TabularStore:
        return cls(data.headers, data.rows)

    # ─── Shape ───────────────────────────────────────────────────────────

    @property
    def headers(self) -> tuple[str, ...]:
        return self._headers

    @property
    def column_count(self) -> int:
        return len(self._headers)

    @property
    def row_count(self) -> int:
        return len(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def interned_count(self) -> int:
        """Distinct strings held by this store's interner."""
        return len(self._interner)

    # ─── Mutation ────────────────────────────────────────────────────────

    def append_rows(self, raw_rows: Iterable[Sequence[str]]) -> int:
        """Intern and append rows; returns how many were appended."""
        intern = self._interner.intern
        start = len(self._rows)
        new_raw: list[Sequence[str]] = []
        for raw in raw_rows:
            self._rows.append([intern(cell) for cell in raw])
            new_raw.append(raw)
        self._widths.update(new_raw)
        return len(self._rows) - start

    def replace(self, headers: Sequence[str], rows: Iterable[Sequence[str]]) -> None:
        """Wholesale swap of headers and rows (new query / back navigation)."""
        self._headers = tuple(headers)
        self._interner = Interner()
        intern = self._interner.intern
        raw_rows = [list(r) for r in rows]
        self._rows = [[intern(cell) for cell in raw] for raw in raw_rows]
        self._widths.rebuild(self._headers, raw_rows)

    def clone(self) -> TabularStore:
        """Independent copy with a compacted interner.

        The new interner holds exactly the strings referenced by rows, so
        repeated cloning never accumulates dead entries.
        """
        dup = TabularStore.__new__(TabularStore)
        dup._headers = self._headers
        dup._interner = Interner()
        resolve = self._interner.resolve
        intern = dup._interner.intern
        dup._rows = [[intern(resolve(h)) for h in row] for row in self._rows]
        dup._widths = copy.deepcopy(self._widths)
        return dup

    # ─── Reads ───────────────────────────────────────────────────────────

    def resolve(self, handle: int) -> str:
        return self._interner.resolve(handle)

    def resolve_row(self, index: int) -> list[str]:
        resolve = self._interner.resolve
        return [resolve(h) for h in self._rows[index]]

    def resolve_rows(self, indices: Iterable[int]) -> list[list[str]]:
        return [self.resolve_row(i) for i in indices]

    def iter_resolved(self, start: int = 0) -> Iterator[list[str]]:
        """Resolved rows from start to the current end."""
        resolve = self._interner.resolve
        for row in self._rows[start:]:
            yield [resolve(h) for h in row]

    def handle_row(self, index: int) -> list[int]:
        return self._rows[index]

    def widths(self) -> list[int]:
        return self._widths.widths()

    def to_table(self) -> TableData:
        """Resolved copy for collaborators (export, tests)."""
        return TableData(headers=list(self._headers), rows=list(self.iter_resolved()))
