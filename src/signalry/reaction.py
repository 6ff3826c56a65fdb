"""Effects — side effects triggered by cell changes.

Unlike Computed (which is lazy and only evaluates on read), an Effect
eagerly re-runs its body whenever its tracked dependencies change.

Two flavors:
- effect(fn): fn receives an `on_cleanup` registrar. The teardown registered
  by run N runs right before run N+1 and on dispose().
- autorun(fn): a zero-argument body with no teardown.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Callable

from signalry import _anchor
from signalry._tracking import current_derivation, untracked

if TYPE_CHECKING:
    from signalry.owner import Owner

Cleanup = Callable[[], None]
OnCleanup = Callable[[Cleanup], None]


class Effect:
    """A reactive side effect that re-runs when its dependencies change.

    Effects run eagerly (unlike Computed which is lazy).
    """

    __slots__ = ("_id", "__weakref__")

    _is_computed = False

    def __init__(self, fn: Callable[[OnCleanup], None]) -> None:
        self._id = _anchor.new_id()
        _anchor.derivation_fns[self._id] = fn
        _anchor.dependencies[self._id] = set()
        _anchor.disposed[self._id] = False
        _anchor.cleanups[self._id] = None
        weakref.finalize(self, _anchor.release, self._id)

    @property
    def disposed(self) -> bool:
        # entries are released on dispose
        return _anchor.disposed.get(self._id, True)

    def _on_cleanup(self, cleanup: Cleanup) -> None:
        if self.disposed:
            untracked(cleanup)
            return
        _anchor.cleanups[self._id] = cleanup

    def _run_cleanup(self) -> None:
        cleanup = _anchor.cleanups.get(self._id)
        _anchor.cleanups[self._id] = None
        if cleanup is not None:
            untracked(cleanup)

    def _run(self) -> None:
        """Tear down the previous run, then re-evaluate, re-tracking dependencies."""
        if self.disposed:
            return

        self._run_cleanup()
        _anchor.unlink(self._id)

        token = current_derivation.set(self)
        try:
            _anchor.derivation_fns[self._id](self._on_cleanup)
        finally:
            current_derivation.reset(token)

    def dispose(self) -> None:
        """Stop this effect and run its last teardown. Safe to call twice."""
        if self.disposed:
            return
        _anchor.disposed[self._id] = True
        _anchor.unlink(self._id)
        try:
            self._run_cleanup()
        finally:
            _anchor.release(self._id)

    def __repr__(self) -> str:
        if self.disposed:
            return "Effect(disposed)"
        name = getattr(_anchor.derivation_fns[self._id], "__name__", "<fn>")
        return f"Effect({name}, active)"


def effect(fn: Callable[[OnCleanup], None], *, owner: Owner | None = None) -> Effect:
    """Run fn immediately, then re-run whenever any cell it reads changes.

    fn receives `on_cleanup`; whatever it registers runs before the next run
    and when the effect is disposed. Returns the Effect (call .dispose() to stop).

    Usage:
        query = Observable("")

        def search(on_cleanup):
            handle = loop.call_later(0.3, run_search, query.get())
            on_cleanup(handle.cancel)

        e = effect(search)
    """
    e = Effect(fn)
    if owner is not None:
        owner.own(e)
    e._run()  # Initial run to establish dependencies
    return e


def autorun(fn: Callable[[], None], *, owner: Owner | None = None) -> Effect:
    """Run fn immediately, then re-run whenever any cell it reads changes.

    Returns the Effect (call .dispose() to stop).

    Usage:
        counter = Observable(0)
        log = []

        r = autorun(lambda: log.append(counter.get()))
        # log == [0], ran immediately

        counter.set(1)
        # log == [0, 1], counter changed

        r.dispose()
        counter.set(2)
        # log == [0, 1], stopped
    """

    def body(on_cleanup: OnCleanup) -> None:
        fn()

    body.__name__ = getattr(fn, "__name__", "autorun")
    return effect(body, owner=owner)
