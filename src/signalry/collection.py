"""UniqueCollection — an ordered, duplicate-free reactive collection.

Uniqueness is decided by a key function (default: ``str``). Items are kept
in an immutable tuple that is replaced, never mutated, on every change.
"""

from __future__ import annotations

from typing import Callable, Generic, Iterable, Iterator, TypeVar

from signalry.action import action
from signalry.computed import Computed
from signalry.observable import Observable, ReadonlyView

T = TypeVar("T")


class UniqueCollection(Generic[T]):
    """Set-like collection that remembers insertion order.

    Usage:
        tags = UniqueCollection(["python"])
        tags.add("asyncio")
        tags.add("python")      # already present, ignored
        tags.toggle("python")   # removed
        tags.size.get()         # 1
    """

    def __init__(
        self,
        initial: Iterable[T] = (),
        key: Callable[[T], str] = str,
    ) -> None:
        self._key = key
        self._items: Observable[tuple[T, ...]] = Observable(self._dedupe(initial))
        self.size: Computed[int] = Computed(lambda: len(self._items.get()))

    def _dedupe(self, items: Iterable[T]) -> tuple[T, ...]:
        seen: set[str] = set()
        kept = []
        for item in items:
            k = self._key(item)
            if k not in seen:
                seen.add(k)
                kept.append(item)
        return tuple(kept)

    @property
    def items(self) -> ReadonlyView[tuple[T, ...]]:
        return self._items.readonly()

    def has(self, item: T) -> bool:
        """Tracked membership test by key."""
        k = self._key(item)
        return any(self._key(i) == k for i in self._items.get())

    @action
    def add(self, item: T) -> None:
        """Append item unless an item with the same key is already present."""
        k = self._key(item)
        current = self._items.peek()
        if not any(self._key(i) == k for i in current):
            self._items.set(current + (item,))

    @action
    def remove(self, item: T) -> None:
        """Drop every item sharing item's key. Unknown keys are a no-op."""
        k = self._key(item)
        current = self._items.peek()
        kept = tuple(i for i in current if self._key(i) != k)
        if len(kept) != len(current):
            self._items.set(kept)

    @action
    def toggle(self, item: T) -> None:
        k = self._key(item)
        if any(self._key(i) == k for i in self._items.peek()):
            self.remove(item)
        else:
            self.add(item)

    def clear(self) -> None:
        self._items.set(())

    def __iter__(self) -> Iterator[T]:
        return iter(self._items.get())

    def __len__(self) -> int:
        return self.size.get()

    def __contains__(self, item: object) -> bool:
        return self.has(item)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f"UniqueCollection({list(self._items.peek())!r})"
