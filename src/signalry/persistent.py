"""PersistentStore — a value cell written through to a key-value Storage.

On construction the stored record (if present and decodable) wins over the
default. After that, every committed write is encoded and stored under the
same key by an effect that lives as long as the store does.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from signalry.errors import SerializationError
from signalry.observable import EqualityFn, Observable, ReadonlyView
from signalry.reaction import OnCleanup, effect
from signalry.storage import Storage

if TYPE_CHECKING:
    from signalry.owner import Owner

T = TypeVar("T")

logger = logging.getLogger("signalry.persistent")


class PersistentStore(Generic[T]):
    """A value that survives restarts through an injected Storage.

    Usage:
        prefs = PersistentStore("user-prefs", {"theme": "dark"}, FileStorage(state_dir))
        prefs.update(lambda s: {**s, "theme": "light"})
        # a new PersistentStore on the same key and storage starts at "light"

    One store per key: two live stores sharing a key overwrite each other.
    """

    def __init__(
        self,
        key: str,
        default: T,
        storage: Storage,
        *,
        dumps: Callable[[Any], str] = json.dumps,
        loads: Callable[[str], Any] = json.loads,
        equals: EqualityFn | None = None,
        owner: Owner | None = None,
    ) -> None:
        self.key = key
        self._default = default
        self._storage = storage
        self._dumps = dumps
        self._loads = loads
        self._state: Observable[T] = Observable(self._hydrate(), equals)
        self._effect = effect(self._persist)
        if owner is not None:
            owner.own(self)

    @property
    def state(self) -> ReadonlyView[T]:
        return self._state.readonly()

    @property
    def default(self) -> T:
        return self._default

    def _hydrate(self) -> T:
        raw = self._storage.get(self.key)
        if raw is None:
            return self._default
        try:
            return self._loads(raw)
        except Exception:
            logger.warning(
                "Discarding unreadable record for %r, using default", self.key, exc_info=True
            )
            return self._default

    def _encode(self, value: T) -> str:
        try:
            return self._dumps(value)
        except Exception as exc:
            raise SerializationError(self.key, f"cannot encode {type(value).__name__}: {exc}") from exc

    def _persist(self, on_cleanup: OnCleanup) -> None:
        encoded = self._encode(self._state.get())
        self._storage.set(self.key, encoded)
        logger.debug("Persisted %r (%d chars)", self.key, len(encoded))

    def set(self, value: T) -> None:
        """Commit value. Raises SerializationError, leaving state and storage untouched."""
        self._encode(value)
        self._state.set(value)

    def update(self, fn: Callable[[T], T]) -> None:
        self.set(fn(self._state.peek()))

    def reset(self) -> None:
        """Restore the default passed to the constructor, not the hydrated value."""
        self.set(self._default)

    def dispose(self) -> None:
        """Stop writing through. The in-memory value stays readable."""
        self._effect.dispose()

    def __repr__(self) -> str:
        return f"PersistentStore({self.key!r}, {self._state.peek()!r})"
