"""Debounced relay — an immediate input cell mirrored into a delayed output cell.

Every change to `input` (re)starts a timer on the asyncio loop. Only when the
timer survives a full quiet period does `output` take the value. A change
arriving earlier cancels the pending timer and starts a new one, so a steady
stream of writes postpones propagation indefinitely (trailing-edge debounce).
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import TYPE_CHECKING, Generic, TypeVar

from signalry.observable import EqualityFn, Observable, ReadonlyView
from signalry.reaction import OnCleanup, effect

if TYPE_CHECKING:
    from signalry.owner import Owner

T = TypeVar("T")

logger = logging.getLogger("signalry.debounce")


class DebouncedRelay(Generic[T]):
    """Input updates immediately, output follows after `delay` seconds of quiet."""

    def __init__(
        self,
        initial: T,
        delay: float,
        *,
        equals: EqualityFn | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        owner: Owner | None = None,
    ) -> None:
        if isinstance(delay, bool) or not isinstance(delay, (int, float)):
            raise TypeError("DebouncedRelay delay must be a number (seconds)")
        if not math.isfinite(delay) or delay < 0:
            raise ValueError("DebouncedRelay delay must be finite and >= 0")

        self.delay = float(delay)
        self.input: Observable[T] = Observable(initial, equals)
        self._output: Observable[T] = Observable(initial, equals)
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._primed = False
        self._effect = effect(self._schedule)
        if owner is not None:
            owner.own(self)

    @property
    def output(self) -> ReadonlyView[T]:
        return self._output.readonly()

    @property
    def pending(self) -> bool:
        """True while a propagation is scheduled and has not fired yet."""
        return self._handle is not None

    def _schedule(self, on_cleanup: OnCleanup) -> None:
        value = self.input.get()
        if not self._primed:
            # output already holds the initial value
            self._primed = True
            return

        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                raise RuntimeError("DebouncedRelay requires a running event loop") from exc

        handle = loop.call_later(self.delay, self._fire, value)
        self._handle = handle

        def cancel() -> None:
            handle.cancel()
            if self._handle is handle:
                self._handle = None

        on_cleanup(cancel)

    def _fire(self, value: T) -> None:
        self._handle = None
        logger.debug("Relaying debounced value %r", value)
        try:
            self._output.set(value)
        except Exception:
            logger.exception("Unhandled exception while relaying debounced value")

    def dispose(self) -> None:
        """Stop relaying. A pending propagation is cancelled, never fired."""
        self._effect.dispose()

    def __repr__(self) -> str:
        return (
            f"DebouncedRelay(input={self.input.peek()!r}, "
            f"output={self._output.peek()!r}, delay={self.delay})"
        )
