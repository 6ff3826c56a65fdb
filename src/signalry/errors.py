"""Exception types raised by signalry."""

from __future__ import annotations


class SignalryError(Exception):
    """Base class for errors raised by this package."""


class SerializationError(SignalryError, ValueError):
    """A value could not be encoded for (or decoded from) a Storage back-end."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key!r}: {message}")
        self.key = key
