"""Write interception — transform, validate or observe every write to a cell.

An interceptor is a plain function ``(proposed, previous) -> resolved``.
InterceptedCell folds each write through its interceptors in order, feeding
each one the previous stage's output and always the *pre-write* value as
`previous`, then commits the result through the base cell's own
equality-gated set().

Order is policy. A validator rejects by returning `previous`, but the fold
carries on and later stages still run on that value:

    [lambda new, prev: abs(new), validator(lambda n: n >= 0)]  # -3 commits 3
    [validator(lambda n: n >= 0), lambda new, prev: abs(new)]  # -3 is rejected

A stage placed after a validator can also override a rejection, e.g.
``lambda new, prev: new + 1`` turns a rejected write into previous + 1.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Generic, NamedTuple, Sequence, TypeVar

from signalry._tracking import untracked
from signalry.observable import EqualityFn, Observable, ReadonlyView, Writable

T = TypeVar("T")

Interceptor = Callable[[T, T], T]

logger = logging.getLogger("signalry.intercept")
debug_logger = logging.getLogger("signalry.debug")


class InterceptedCell(Generic[T]):
    """A cell whose writes pass through an ordered interceptor chain.

    Usage:
        count = InterceptedCell(Observable(0), [InterceptionLog(), validator(lambda n: n >= 0)])
        count.set(5)    # 5
        count.set(-1)   # still 5
    """

    def __init__(self, base: Writable[T], interceptors: Sequence[Interceptor[T]] = ()) -> None:
        self._base = base
        self.interceptors: tuple[Interceptor[T], ...] = tuple(interceptors)

    @classmethod
    def of(
        cls,
        initial: T,
        interceptors: Sequence[Interceptor[T]] = (),
        *,
        equals: EqualityFn | None = None,
    ) -> InterceptedCell[T]:
        """Wrap a fresh Observable holding `initial`."""
        return cls(Observable(initial, equals), interceptors)

    def get(self) -> T:
        return self._base.get()

    def resolve(self, proposed: T) -> T:
        """The value a set(proposed) would commit, without committing it."""
        previous = untracked(self._base.get)
        value = proposed
        for interceptor in self.interceptors:
            value = interceptor(value, previous)
        return value

    def set(self, value: T) -> None:
        self._base.set(self.resolve(value))

    def update(self, fn: Callable[[T], T]) -> None:
        self.set(fn(untracked(self._base.get)))

    def readonly(self) -> ReadonlyView[T]:
        return ReadonlyView(self._base)

    def __repr__(self) -> str:
        return f"InterceptedCell({self._base!r}, {len(self.interceptors)} interceptors)"


def validator(
    predicate: Callable[[T], bool],
    name: str | None = None,
) -> Interceptor[T]:
    """Build an interceptor that keeps `previous` whenever predicate(proposed) is false."""
    label = name or getattr(predicate, "__name__", "validator")

    def validate(proposed: T, previous: T) -> T:
        if predicate(proposed):
            return proposed
        logger.warning(
            "Validation %s rejected %r, keeping previous value %r", label, proposed, previous
        )
        return previous

    validate.__name__ = f"validate_{label}"
    return validate


class LogEntry(NamedTuple):
    previous: object
    proposed: object
    timestamp: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InterceptionLog:
    """Transparent interceptor that records every proposed write.

    Records what reached *this* stage: place it first to see raw writes,
    after a transform to see transformed ones.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self.entries: list[LogEntry] = []
        self._clock = clock

    def __call__(self, proposed: T, previous: T) -> T:
        entry = LogEntry(previous, proposed, self._clock())
        self.entries.append(entry)
        logger.debug(
            "Cell update: previous=%r new=%r at %s",
            previous,
            proposed,
            entry.timestamp.isoformat(),
        )
        return proposed

    def clear(self) -> None:
        self.entries.clear()

    def __len__(self) -> int:
        return len(self.entries)


class DebugCell(Generic[T]):
    """Decorator around a cell that logs every read, set and update.

    Reads, writes and equality behave exactly as on the base cell; the only
    addition is DEBUG output on the ``signalry.debug`` logger.
    """

    def __init__(self, name: str, base: Writable[T]) -> None:
        self.name = name
        self._base = base

    @classmethod
    def of(cls, name: str, initial: T, *, equals: EqualityFn | None = None) -> DebugCell[T]:
        return cls(name, Observable(initial, equals))

    def get(self) -> T:
        value = self._base.get()
        debug_logger.debug("[%s] read: %r", self.name, value)
        return value

    def set(self, value: T) -> None:
        debug_logger.debug("[%s] set: %r", self.name, value)
        self._base.set(value)

    def update(self, fn: Callable[[T], T]) -> None:
        debug_logger.debug("[%s] update called", self.name)
        old = untracked(self._base.get)
        self._base.update(fn)
        debug_logger.debug("[%s] update: %r -> %r", self.name, old, untracked(self._base.get))

    def readonly(self) -> ReadonlyView[T]:
        return ReadonlyView(self)

    def __repr__(self) -> str:
        return f"DebugCell({self.name!r}, {self._base!r})"
