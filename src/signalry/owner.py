"""Owner — disposal scope for effects, timers and the primitives built on them.

Every primitive that holds a live resource (an effect, a pending timer, an
in-flight task) accepts `owner=` and registers itself. Disposing the owner
disposes everything it owns, newest first.
"""

from __future__ import annotations

from typing import Protocol, TypeVar


class Disposable(Protocol):
    def dispose(self) -> None: ...


D = TypeVar("D", bound=Disposable)


class Owner:
    """Collects disposables and tears them down together."""

    def __init__(self) -> None:
        self._disposables: list[Disposable] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def own(self, disposable: D) -> D:
        """Register a disposable. Owning after disposal disposes it at once."""
        if self._disposed:
            disposable.dispose()
        else:
            self._disposables.append(disposable)
        return disposable

    def dispose(self) -> None:
        """Dispose every owned object in reverse registration order. Idempotent."""
        if self._disposed:
            return
        self._disposed = True
        while self._disposables:
            self._disposables.pop().dispose()

    def __enter__(self) -> Owner:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"{len(self._disposables)} owned"
        return f"Owner({state})"
