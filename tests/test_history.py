"""Tests for HistoryLog."""

import pytest

from signalry import HistoryLog, autorun


class TestHistoryLog:
    def test_initial_state(self):
        h = HistoryLog("A")
        assert h.value.get() == "A"
        assert h.entries.get() == ("A",)
        assert h.can_undo.get() is False
        assert h.can_redo.get() is False

    def test_undo_redo(self):
        h = HistoryLog("Hello")
        h.write("Hello World")
        h.write("Hello World!")
        h.undo()
        assert h.value.get() == "Hello World"
        h.redo()
        assert h.value.get() == "Hello World!"

    def test_branch_truncation(self):
        h = HistoryLog("A")
        h.write("B")
        h.write("C")
        h.undo()
        assert h.value.get() == "B"
        h.write("D")
        assert h.value.get() == "D"
        assert h.can_redo.get() is False
        assert h.entries.get() == ("A", "B", "D")

    def test_double_undo_then_write_drops_redo(self):
        h = HistoryLog(0)
        for v in (1, 2, 3):
            h.write(v)
        h.undo()
        h.undo()
        h.write(9)
        assert h.can_redo.get() is False
        assert h.entries.get() == (0, 1, 9)

    def test_length_after_writes(self):
        h = HistoryLog(0, capacity=10)
        for n in range(1, 6):
            h.write(n)
            assert len(h.entries.get()) == n + 1

    def test_undo_redo_matches_indexing(self):
        h = HistoryLog("v0")
        for n in range(1, 6):
            h.write(f"v{n}")
        entries = h.entries.get()
        for m in range(1, 6):
            for _ in range(m):
                h.undo()
            assert h.value.get() == entries[5 - m]
            for _ in range(m):
                h.redo()
            assert h.value.get() == entries[5]

    def test_boundaries_are_noops(self):
        h = HistoryLog("A")
        h.undo()
        h.redo()
        assert h.value.get() == "A"
        assert h.index.get() == 0
        h.write("B")
        h.redo()
        assert h.value.get() == "B"

    def test_capacity_evicts_oldest(self):
        h = HistoryLog(0, capacity=3)
        h.write(1)
        h.write(2)
        assert h.index.get() == 2
        h.write(3)
        assert h.entries.get() == (1, 2, 3)
        assert h.index.get() == 2
        assert h.value.get() == 3
        h.undo()
        h.undo()
        assert h.value.get() == 1
        assert h.can_undo.get() is False

    def test_default_capacity(self):
        h = HistoryLog(0)
        for n in range(1, 100):
            h.write(n)
        assert len(h) == 50
        assert h.entries.get()[0] == 50

    def test_write_is_one_settled_update(self):
        h = HistoryLog("A")
        log = []
        autorun(lambda: log.append((h.value.get(), h.can_undo.get(), h.can_redo.get())))
        h.write("B")
        h.undo()
        assert log == [("A", False, False), ("B", True, False), ("A", False, True)]

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            HistoryLog(0, capacity=0)
        with pytest.raises(TypeError):
            HistoryLog(0, capacity=2.5)
