"""Observable values — state that tracks its readers.

When an Observable is read inside a Computed or Effect evaluation,
the dependency is automatically registered. When the Observable changes,
all dependents are scheduled for re-evaluation.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

import weakref
from typing import Callable, Generic, Protocol, TypeVar

from signalry import _anchor
from signalry._tracking import begin_batch, end_batch, notify_observers, track
from signalry.equality import default_equals

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

EqualityFn = Callable[[T, T], bool]


class Readable(Protocol[T_co]):
    """Anything with a tracked get(): Observable, Computed, ReadonlyView."""

    def get(self) -> T_co: ...


class Writable(Readable[T], Protocol[T]):
    def set(self, value: T) -> None: ...

    def update(self, fn: Callable[[T], T]) -> None: ...


class Observable(Generic[T]):
    """A single observable value with automatic dependency tracking."""

    __slots__ = ("_id", "__weakref__")

    def __init__(self, value: T, equals: EqualityFn | None = None) -> None:
        self._id = _anchor.new_id()
        _anchor.values[self._id] = value
        _anchor.equality_fns[self._id] = equals or default_equals
        _anchor.observers[self._id] = {}
        weakref.finalize(self, _anchor.release, self._id)

    def get(self) -> T:
        """Read the value. If inside a derivation, registers the dependency."""
        track(self._id)
        return _anchor.values[self._id]

    def set(self, value: T) -> None:
        """Write a new value. No-op when equal to the current one."""
        old = _anchor.values[self._id]
        if not _anchor.equality_fns[self._id](old, value):
            _anchor.values[self._id] = value
            self._notify()

    def update(self, fn: Callable[[T], T]) -> None:
        """Write fn(current). The read of the current value is not tracked."""
        self.set(fn(_anchor.values[self._id]))

    def peek(self) -> T:
        """Read the value without registering a dependency."""
        return _anchor.values[self._id]

    def readonly(self) -> ReadonlyView[T]:
        return ReadonlyView(self)

    def _notify(self) -> None:
        """Invalidate every observer, running effects once the wave settles."""
        begin_batch()
        try:
            notify_observers(self._id)
        finally:
            end_batch()

    def __repr__(self) -> str:
        return f"Observable({_anchor.values[self._id]!r})"


class ReadonlyView(Generic[T]):
    """Read-only face of a cell. Reads are tracked like the cell's own."""

    __slots__ = ("_source",)

    def __init__(self, source: Readable[T]) -> None:
        self._source = source

    def get(self) -> T:
        return self._source.get()

    def __repr__(self) -> str:
        return f"ReadonlyView({self._source!r})"
