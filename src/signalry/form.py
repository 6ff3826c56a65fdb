"""Form fields — a value with touched/dirty flags and computed validation.

A validator takes the value and returns an error message, or None when the
value is acceptable.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Callable, Generic, Iterable, TypeVar

from signalry.action import action
from signalry.computed import Computed
from signalry.observable import Observable
from signalry.reaction import OnCleanup, effect

if TYPE_CHECKING:
    from signalry.owner import Owner

T = TypeVar("T")

Validator = Callable[[T], str | None]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class FormField(Generic[T]):
    """Usage:
    email = FormField("", [required, email])
    email.value.set("ada@example.com")
    email.valid.get()   # True
    """

    def __init__(
        self,
        initial: T,
        validators: Iterable[Validator[T]] = (),
        *,
        owner: Owner | None = None,
    ) -> None:
        self.initial = initial
        self.validators: tuple[Validator[T], ...] = tuple(validators)
        self.value: Observable[T] = Observable(initial)
        self.touched: Observable[bool] = Observable(False)
        self.dirty: Observable[bool] = Observable(False)
        self.errors: Computed[list[str]] = Computed(self._collect_errors)
        self.valid: Computed[bool] = Computed(lambda: not self.errors.get())
        self._effect = effect(self._track_dirty)
        if owner is not None:
            owner.own(self)

    def _collect_errors(self) -> list[str]:
        value = self.value.get()
        return [msg for check in self.validators if (msg := check(value))]

    def _track_dirty(self, on_cleanup: OnCleanup) -> None:
        if self.value.get() != self.initial:
            self.dirty.set(True)

    def touch(self) -> None:
        self.touched.set(True)

    @action
    def reset(self) -> None:
        self.value.set(self.initial)
        self.touched.set(False)
        self.dirty.set(False)

    def dispose(self) -> None:
        self._effect.dispose()

    def __repr__(self) -> str:
        return f"FormField({self.value.peek()!r}, dirty={self.dirty.peek()})"


def required(value: object) -> str | None:
    if value is None or value == "":
        return "This field is required"
    return None


def email(value: str) -> str | None:
    return None if _EMAIL_RE.match(value) else "Invalid email format"


def min_length(minimum: int) -> Validator[str]:
    def check(value: str) -> str | None:
        return None if len(value) >= minimum else f"Minimum length is {minimum}"

    check.__name__ = f"min_length_{minimum}"
    return check
