"""Dependency tracking engine.

Uses contextvars to track which cells are read during a computed/effect
evaluation, building the dependency graph automatically.

Batching: mutations inside an @action or `with transaction()` accumulate
invalidations and flush them once at the end, so effects only ever observe
settled state.
"""

from __future__ import annotations

import contextvars
import weakref
from typing import TYPE_CHECKING, Callable, TypeVar

from signalry import _anchor

if TYPE_CHECKING:
    from signalry.computed import Computed
    from signalry.reaction import Effect

    Derivation = Computed | Effect

T = TypeVar("T")

# The currently-evaluating derivation (computed or effect).
# When set, any Observable.get() call registers itself as a dependency.
current_derivation: contextvars.ContextVar[Derivation | None] = contextvars.ContextVar(
    "current_derivation", default=None
)

# Batch depth counter. When > 0, invalidations are deferred.
_batch_depth: int = 0

# Derivations invalidated during a batch, in the order they were invalidated.
_pending: dict[Derivation, None] = {}


def track(cell_id: int) -> None:
    """Register the cell as a dependency of the running derivation, if any."""
    derivation = current_derivation.get()
    if derivation is None:
        return
    deps = _anchor.dependencies.get(derivation._id)
    if deps is None:
        return
    subscribers = _anchor.observers[cell_id]
    if derivation._id not in subscribers:
        subscribers[derivation._id] = weakref.ref(derivation) if derivation._is_computed else derivation
    deps.add(cell_id)


def notify_observers(cell_id: int) -> None:
    """Schedule every live derivation that read the cell, in subscription order."""
    for entry in list(_anchor.observers.get(cell_id, {}).values()):
        derivation = entry() if isinstance(entry, weakref.ref) else entry
        if derivation is not None:
            schedule(derivation)


def untracked(fn: Callable[[], T]) -> T:
    """Run fn with dependency tracking suspended.

    Cells read inside fn are not added to the caller's dependency set.

    Usage:
        @computed
        def message():
            return f"{count.get()} (hidden: {untracked(hidden.get)})"
    """
    token = current_derivation.set(None)
    try:
        return fn()
    finally:
        current_derivation.reset(token)


def begin_batch() -> None:
    """Enter a batching scope. Nested batches are supported."""
    global _batch_depth
    _batch_depth += 1


def end_batch() -> None:
    """Exit a batching scope. When the outermost scope exits, flush pending derivations."""
    global _batch_depth
    _batch_depth -= 1
    if _batch_depth == 0:
        _flush_pending()


def schedule(derivation: Derivation) -> None:
    """Schedule a derivation for re-evaluation.

    Computeds are invalidated at once (they only mark themselves dirty).
    Effects are deferred while inside a batch, otherwise run immediately.
    """
    if derivation._is_computed:
        derivation._run()
    elif _batch_depth > 0:
        _pending[derivation] = None
    else:
        derivation._run()


def _flush_pending() -> None:
    """Run all pending derivations. Handles derivations scheduled during flush.

    A derivation that raises does not stop the others: every pending one
    runs, then the first exception is re-raised.
    """
    global _batch_depth
    error: BaseException | None = None
    while _pending:
        # Snapshot and clear: derivations may schedule new ones during run.
        batch = list(_pending)
        _pending.clear()
        _batch_depth += 1
        try:
            for derivation in batch:
                try:
                    derivation._run()
                except Exception as exc:
                    if error is None:
                        error = exc
        finally:
            _batch_depth -= 1
    if error is not None:
        raise error


def get_pending_count() -> int:
    """Number of derivations waiting to run. Useful for testing."""
    return len(_pending)
