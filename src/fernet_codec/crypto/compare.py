"""Byte comparison that does not exit early on the first mismatch."""

from __future__ import annotations


def constant_time_equals(a: bytes, b: bytes) -> bool:
    """Return True iff ``a`` and ``b`` hold the same bytes.

    Length is not secret: sequences of different lengths compare unequal
    without inspecting their content. Equal-length inputs are always walked
    to the end.
    """
    if len(a) != len(b):
        return False
    acc = 0
    for x, y in zip(a, b, strict=True):
        acc |= x ^ y
    return acc == 0
