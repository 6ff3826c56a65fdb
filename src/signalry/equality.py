"""Equality functions used to gate cell writes.

A write only notifies observers when the cell's equality function says the
new value differs from the old one.
"""

from __future__ import annotations

from enum import Enum

_PRIMITIVES = (type(None), bool, int, float, complex, str, bytes, Enum)


def default_equals(a: object, b: object) -> bool:
    """Identity for compound values, value equality for primitives.

    A list or dict written back after in-place mutation is the *same* object
    and will not notify; a fresh copy with equal contents will.
    """
    if a is b:
        return True
    if isinstance(a, _PRIMITIVES) and isinstance(b, _PRIMITIVES):
        return a == b
    return False


def structural_equals(a: object, b: object) -> bool:
    """Content equality, for cells holding lists, dicts, tuples or dataclasses."""
    return a is b or a == b
