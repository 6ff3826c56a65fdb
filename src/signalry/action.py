"""Actions and transactions — batched state mutations.

Wrapping mutations in an @action or `with transaction()` defers every
effect until the outermost scope exits. Effects then run once against the
settled state, never against an intermediate one.
"""

from __future__ import annotations

import functools
from typing import TypeVar, Callable, ParamSpec
from contextlib import contextmanager
from signalry._tracking import begin_batch, end_batch

P = ParamSpec("P")
R = TypeVar("R")


def action(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator: batch all cell writes inside fn.

    Effects only fire after fn returns, not during.

    Usage:
        history = Observable(("a",))
        index = Observable(0)

        @action
        def push(value):
            history.set(history.peek() + (value,))
            index.set(index.peek() + 1)
            # effects see the new entry and the new index together
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        begin_batch()
        try:
            return fn(*args, **kwargs)
        finally:
            end_batch()

    return wrapper


@contextmanager
def transaction():
    """Context manager for batching writes.

    Usage:
        with transaction():
            first.set("Ada")
            last.set("Lovelace")
            # effects fire here, after both are set
    """
    begin_batch()
    try:
        yield
    finally:
        end_batch()
