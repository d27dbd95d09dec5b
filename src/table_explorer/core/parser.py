"""psql-style table text parsing.

Expected shape::

     id | name  | age
    ----+-------+-----
     1  | Alice | 30
     2  | Bob   | 25
    (2 rows)

Blank lines before the header and between data lines are skipped. The footer
line terminates data and is never part of the row set. Malformed data lines
are kept with whatever cell count splitting produces.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field


@dataclass
class TableData:
    """A fully-formed header + row set (non-streaming path)."""

    headers: list[str]
    rows: list[list[str]] = field(default_factory=list)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    @property
    def row_count(self) -> int:
        return len(self.rows)


def split_cells(line: str) -> list[str]:
    return [cell.strip() for cell in line.rstrip("\r\n").split("|")]


_SEPARATOR_CHARS = frozenset("-+")


def is_separator(line: str) -> bool:
    """psql rule line: contains ``---``, or is made only of ``-`` and ``+``."""
    if "---" in line:
        return True
    compact = line.strip().replace(" ", "")
    return "-" in compact and set(compact) <= _SEPARATOR_CHARS


def is_footer(line: str) -> bool:
    trimmed = line.strip()
    return trimmed.startswith("(") and trimmed.endswith(")") and "row" in trimmed


def parse_header(lines: Sequence[str]) -> tuple[list[str], int] | None:
    """Find the header/separator pair.

    Returns (headers, index of first data line) or None when the first
    non-blank line is not followed by a separator line.
    """
    for idx, line in enumerate(lines):
        if not line.strip():
            continue
        headers = split_cells(line)
        if all(not h for h in headers):
            return None
        sep_idx = idx + 1
        if sep_idx >= len(lines) or not is_separator(lines[sep_idx]):
            return None
        return headers, sep_idx + 1
    return None


def parse_line(line: str) -> list[str] | None:
    """Parse one data line; None for blank and footer lines."""
    if not line.strip() or is_footer(line):
        return None
    return split_cells(line)


def parse_psql(text: str) -> TableData | None:
    """Parse a complete psql table dump. None if empty or malformed."""
    lines = text.splitlines()
    found = parse_header(lines)
    if found is None:
        return None
    headers, data_start = found

    rows: list[list[str]] = []
    for line in lines[data_start:]:
        if not line.strip():
            continue
        if is_footer(line):
            break
        rows.append(split_cells(line))
    return TableData(headers=headers, rows=rows)


class InvalidInputFormat(ValueError):
    """Input does not start with a psql header/separator pair."""


def load_table(text: str) -> TableData:
    """parse_psql() for callers that need a table or an error."""
    table = parse_psql(text)
    if table is None:
        raise InvalidInputFormat("Invalid or empty input. Expected psql table format.")
    return table
