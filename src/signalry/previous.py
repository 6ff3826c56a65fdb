"""Computed values that can see what their source was last time."""

from __future__ import annotations

from typing import Callable, TypeVar

from signalry.computed import Computed
from signalry.observable import Readable

T = TypeVar("T")
R = TypeVar("R")


class _Absent:
    """Sentinel passed as `previous` on the first recomputation."""

    __slots__ = ()

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


def computed_with_previous(
    source: Readable[T],
    fn: Callable[[T, T | _Absent], R],
) -> Computed[R]:
    """Computed of fn(current, previous) over a single source.

    `previous` is the source value seen by the prior recomputation, or
    ABSENT the first time. Only one step is remembered, and it is only
    advanced after fn returns: if fn raises, the next read sees the same
    previous value again.

    Usage:
        price = Observable(10)
        delta = computed_with_previous(
            price, lambda cur, prev: 0 if prev is ABSENT else cur - prev
        )
        delta.get()   # 0
        price.set(15)
        delta.get()   # 5
    """
    remembered: list = [ABSENT]

    def derive() -> R:
        current = source.get()
        result = fn(current, remembered[0])
        remembered[0] = current
        return result

    derive.__name__ = getattr(fn, "__name__", "with_previous")
    return Computed(derive)
