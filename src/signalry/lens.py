"""Lens — a writable view of a cell through a pair of conversions.

Two cells that must mirror each other (Celsius and Fahrenheit, say) do not
need two effects watching each other plus an "updating" flag. Keep one cell
as the source of truth and expose the other as a Lens: reads are a Computed
of forward(source), writes go back through backward().
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from signalry._tracking import untracked
from signalry.computed import Computed
from signalry.observable import ReadonlyView, Writable

S = TypeVar("S")
V = TypeVar("V")


class Lens(Generic[S, V]):
    """Usage:
    celsius = Observable(0.0)
    fahrenheit = Lens(celsius, lambda c: c * 9 / 5 + 32, lambda f: (f - 32) * 5 / 9)
    fahrenheit.set(212)   # celsius.get() == 100.0
    """

    def __init__(
        self,
        source: Writable[S],
        forward: Callable[[S], V],
        backward: Callable[[V], S],
    ) -> None:
        self._source = source
        self._backward = backward
        self._view: Computed[V] = Computed(lambda: forward(source.get()))

    def get(self) -> V:
        return self._view.get()

    def set(self, value: V) -> None:
        self._source.set(self._backward(value))

    def update(self, fn: Callable[[V], V]) -> None:
        self.set(fn(untracked(self._view.get)))

    def readonly(self) -> ReadonlyView[V]:
        return ReadonlyView(self)

    def __repr__(self) -> str:
        return f"Lens({self._source!r})"
