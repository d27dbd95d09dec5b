"""String interner for cell values.

Repeated cell strings (status columns, NULLs, enum-like values) are stored once
and referenced by small integer handles.

// [LAW:one-source-of-truth] A handle is only meaningful against the Interner
// that produced it. Stores never share interners.
"""

from __future__ import annotations

from collections.abc import Iterator


class Interner:
    """Bidirectional map between string content and dense int handles."""

    __slots__ = ("_handles", "_strings")

    def __init__(self) -> None:
        self._handles: dict[str, int] = {}
        self._strings: list[str] = []

    def intern(self, value: str) -> int:
        """Return the handle for value, allocating one on first sight."""
        handle = self._handles.get(value)
        if handle is None:
            handle = len(self._strings)
            self._handles[value] = handle
            self._strings.append(value)
        return handle

    def resolve(self, handle: int) -> str:
        return self._strings[handle]

    def get(self, value: str) -> int | None:
        """Handle for value if already interned, without allocating."""
        return self._handles.get(value)

    def __len__(self) -> int:
        return len(self._strings)

    def __contains__(self, value: object) -> bool:
        return value in self._handles

    def __iter__(self) -> Iterator[str]:
        return iter(self._strings)
