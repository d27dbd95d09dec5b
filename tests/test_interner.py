"""Tests for the cell string interner."""

from table_explorer.core.interner import Interner


class TestIntern:
    def test_same_string_same_handle(self):
        interner = Interner()
        a = interner.intern("active")
        b = interner.intern("active")
        assert a == b
        assert len(interner) == 1

    def test_distinct_strings_distinct_handles(self):
        interner = Interner()
        handles = {interner.intern(s) for s in ("a", "b", "c")}
        assert len(handles) == 3
        assert len(interner) == 3

    def test_handles_are_dense_from_zero(self):
        interner = Interner()
        assert [interner.intern(s) for s in ("x", "y", "x", "z")] == [0, 1, 0, 2]

    def test_empty_string_is_a_value(self):
        interner = Interner()
        h = interner.intern("")
        assert interner.resolve(h) == ""


class TestResolve:
    def test_round_trip(self):
        interner = Interner()
        values = ["NULL", "Alice", "東京", "NULL", "Alice"]
        handles = [interner.intern(v) for v in values]
        assert [interner.resolve(h) for h in handles] == values

    def test_get_does_not_allocate(self):
        interner = Interner()
        interner.intern("present")
        assert interner.get("present") == 0
        assert interner.get("missing") is None
        assert len(interner) == 1

    def test_contains_and_iter(self):
        interner = Interner()
        for v in ("b", "a", "b"):
            interner.intern(v)
        assert "a" in interner
        assert "c" not in interner
        assert list(interner) == ["b", "a"]


def test_repeated_values_are_stored_once():
    interner = Interner()
    for i in range(10_000):
        interner.intern("pending" if i % 2 else "done")
    assert len(interner) == 2
