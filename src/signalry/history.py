"""Bounded undo/redo history over a value.

The log is a tuple of past values plus an index into it. `write()` is the
only way to add entries; undo/redo just move the index. Writing after an
undo drops the redo branch. Once the log reaches `capacity` entries the
oldest one is evicted on every write, so the reachable undo depth stops
growing.
"""

from __future__ import annotations

import logging
from typing import Generic, TypeVar

from signalry.action import action
from signalry.computed import Computed
from signalry.observable import Observable, ReadonlyView

T = TypeVar("T")

DEFAULT_CAPACITY = 50

logger = logging.getLogger("signalry.history")


class HistoryLog(Generic[T]):
    """A value with linear undo/redo.

    Usage:
        text = HistoryLog("Hello")
        text.write("Hello World")
        text.undo()   # value.get() == "Hello"
        text.redo()   # value.get() == "Hello World"
    """

    def __init__(self, initial: T, capacity: int = DEFAULT_CAPACITY) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise TypeError("HistoryLog capacity must be an int")
        if capacity < 1:
            raise ValueError("HistoryLog capacity must be >= 1")

        self.capacity = capacity
        self._entries: Observable[tuple[T, ...]] = Observable((initial,))
        self._index: Observable[int] = Observable(0)

        self.value: Computed[T] = Computed(lambda: self._entries.get()[self._index.get()])
        self.can_undo: Computed[bool] = Computed(lambda: self._index.get() > 0)
        self.can_redo: Computed[bool] = Computed(
            lambda: self._index.get() < len(self._entries.get()) - 1
        )

    @property
    def entries(self) -> ReadonlyView[tuple[T, ...]]:
        """The full log, oldest first."""
        return self._entries.readonly()

    @property
    def index(self) -> ReadonlyView[int]:
        return self._index.readonly()

    @action
    def write(self, value: T) -> None:
        """Truncate the redo branch, append value, then re-index or evict."""
        index = self._index.peek()
        entries = self._entries.peek()[: index + 1] + (value,)
        if len(entries) > self.capacity:
            entries = entries[1:]
            logger.debug("History at capacity %d, evicted oldest entry", self.capacity)
        else:
            self._index.set(index + 1)
        self._entries.set(entries)

    @action
    def undo(self) -> None:
        """Step back one entry. No-op at the start of the log."""
        if self._index.peek() > 0:
            self._index.update(lambda i: i - 1)

    @action
    def redo(self) -> None:
        """Step forward one entry. No-op at the end of the log."""
        if self._index.peek() < len(self._entries.peek()) - 1:
            self._index.update(lambda i: i + 1)

    def __len__(self) -> int:
        return len(self._entries.peek())

    def __repr__(self) -> str:
        return f"HistoryLog({self._entries.peek()!r}, index={self._index.peek()})"
