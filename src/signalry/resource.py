"""Resource — data/loading/error state around an async producer.

Nothing loads until refresh() is called. Each refresh() starts a new load on
the running event loop and returns its task. Overlapping refreshes are
resolved by generation: only the most recently started load may write its
outcome, whatever order the loads finish in.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Generic, Literal, TypeVar

from signalry.action import transaction
from signalry.computed import Computed
from signalry.observable import Observable, ReadonlyView

if TYPE_CHECKING:
    from signalry.owner import Owner

T = TypeVar("T")

Status = Literal["idle", "loading", "success", "error"]

logger = logging.getLogger("signalry.resource")


class Resource(Generic[T]):
    """Tri-state wrapper around a zero-argument async producer.

    Usage:
        user = Resource(fetch_user)
        await user.refresh()
        if user.error.get() is None:
            render(user.data.get())

    While a load is in flight, `loading` is True and both `data` and `error`
    are None. A completed load sets exactly one of them (data may legitimately
    be None if that is what the producer returned).
    """

    def __init__(
        self,
        producer: Callable[[], Awaitable[T]],
        *,
        name: str | None = None,
        owner: Owner | None = None,
    ) -> None:
        if not callable(producer):
            raise TypeError("Resource requires a callable producer")
        self._producer = producer
        self.name = name or getattr(producer, "__name__", "resource")
        self._data: Observable[T | None] = Observable(None)
        self._loading: Observable[bool] = Observable(False)
        self._error: Observable[BaseException | None] = Observable(None)
        self._completed = Observable(False)
        self._generation = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self.status: Computed[Status] = Computed(self._status)
        if owner is not None:
            owner.own(self)

    @property
    def data(self) -> ReadonlyView[T | None]:
        return self._data.readonly()

    @property
    def loading(self) -> ReadonlyView[bool]:
        return self._loading.readonly()

    @property
    def error(self) -> ReadonlyView[BaseException | None]:
        return self._error.readonly()

    @property
    def generation(self) -> int:
        """Number of loads started so far."""
        return self._generation

    def _status(self) -> Status:
        if self._loading.get():
            return "loading"
        if self._error.get() is not None:
            return "error"
        if self._completed.get():
            return "success"
        return "idle"

    def refresh(self) -> asyncio.Task[None]:
        """Start a load. The returned task never raises the producer's error."""
        loop = asyncio.get_running_loop()
        self._generation += 1
        generation = self._generation
        with transaction():
            self._loading.set(True)
            self._error.set(None)
            self._data.set(None)
            self._completed.set(False)

        task = loop.create_task(self._load(generation), name=f"{self.name}#{generation}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _load(self, generation: int) -> None:
        try:
            result = await self._producer()
        except Exception as exc:
            if generation != self._generation:
                logger.debug("Dropping stale failure of %s#%d", self.name, generation)
                return
            logger.debug("Load %s#%d failed", self.name, generation, exc_info=True)
            with transaction():
                self._data.set(None)
                self._error.set(exc)
                self._loading.set(False)
                self._completed.set(True)
            return

        if generation != self._generation:
            logger.debug("Dropping stale result of %s#%d", self.name, generation)
            return
        with transaction():
            self._error.set(None)
            self._data.set(result)
            self._loading.set(False)
            self._completed.set(True)

    def dispose(self) -> None:
        """Cancel in-flight loads. Their outcomes are never written."""
        self._generation += 1
        for task in list(self._tasks):
            task.cancel()
        self._loading.set(False)

    def __repr__(self) -> str:
        return (
            f"Resource({self.name}, loading={self._loading.peek()}, "
            f"data={self._data.peek()!r}, error={self._error.peek()!r})"
        )
