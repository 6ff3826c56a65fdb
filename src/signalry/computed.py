"""Computed values — derived state with automatic dependency tracking.

A Computed wraps a function. When evaluated, it tracks which cells
the function reads and caches the result. When any dependency changes,
the cached value is invalidated. On next read, it re-evaluates.

Computed values are lazy — they only recompute when read.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

import weakref
from typing import TypeVar, Generic, Callable

from signalry._tracking import current_derivation, notify_observers, track
from signalry import _anchor
from signalry.observable import ReadonlyView

T = TypeVar("T")

_UNSET = object()


class Computed(Generic[T]):
    """A derived value that auto-tracks dependencies and caches the result."""

    __slots__ = ("_id", "__weakref__")

    _is_computed = True

    def __init__(self, fn: Callable[[], T]) -> None:
        self._id = _anchor.new_id()
        _anchor.derivation_fns[self._id] = fn
        _anchor.cached_values[self._id] = _UNSET
        _anchor.dirty_flags[self._id] = True
        _anchor.failed[self._id] = False
        _anchor.dependencies[self._id] = set()
        _anchor.observers[self._id] = {}
        weakref.finalize(self, _anchor.release, self._id)

    @property
    def _fn(self) -> Callable[[], T]:
        return _anchor.derivation_fns[self._id]

    def get(self) -> T:
        """Read the computed value. Recomputes if dirty.

        If the function raises, the exception reaches the reader, the last
        good value stays cached and the next read retries. Readers that saw
        the failure are scheduled again when a dependency changes.
        """
        track(self._id)

        if _anchor.dirty_flags[self._id]:
            self._recompute()

        return _anchor.cached_values[self._id]

    def readonly(self) -> ReadonlyView[T]:
        return ReadonlyView(self)

    def _recompute(self) -> None:
        """Re-evaluate the function, tracking dependencies."""
        _anchor.unlink(self._id)

        token = current_derivation.set(self)
        try:
            _anchor.cached_values[self._id] = self._fn()
        except Exception:
            _anchor.failed[self._id] = True
            raise
        finally:
            current_derivation.reset(token)

        _anchor.failed[self._id] = False
        _anchor.dirty_flags[self._id] = False

    def _run(self) -> None:
        """Called by the scheduler when a dependency changed.

        For Computed, we mark dirty and propagate to our own observers.
        A computed left dirty by a failed evaluation propagates too.
        We don't recompute eagerly; that happens on next .get().
        """
        if _anchor.dirty_flags[self._id] and not _anchor.failed[self._id]:
            return
        _anchor.dirty_flags[self._id] = True
        _anchor.failed[self._id] = False
        notify_observers(self._id)

    def dispose(self) -> None:
        """Disconnect from all dependencies and readers.

        A later get() re-evaluates from scratch.
        """
        _anchor.unlink(self._id)
        _anchor.observers[self._id].clear()
        _anchor.dirty_flags[self._id] = True
        _anchor.failed[self._id] = False
        _anchor.cached_values[self._id] = _UNSET

    def __repr__(self) -> str:
        dirty = _anchor.dirty_flags[self._id]
        val = _anchor.cached_values[self._id]
        state = "dirty" if dirty else f"cached={val!r}"
        name = getattr(self._fn, "__name__", "<fn>")
        return f"Computed({name}, {state})"


def computed(fn: Callable[[], T]) -> Computed[T]:
    """Decorator/factory to create a Computed from a function.

    Usage:
        counter = Observable(0)

        @computed
        def doubled():
            return counter.get() * 2

        doubled.get()  # 0
        counter.set(5)
        doubled.get()  # 10
    """
    return Computed(fn)
