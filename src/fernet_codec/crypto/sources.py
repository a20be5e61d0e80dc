"""Injectable time and randomness sources for the codec."""

from __future__ import annotations

import os
import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of the current Unix time in seconds."""

    def now(self) -> float:
        """Return seconds since the epoch."""
        ...


@runtime_checkable
class RandomSource(Protocol):
    """Source of cryptographically secure random bytes."""

    def random_bytes(self, size: int) -> bytes:
        """Return ``size`` random bytes."""
        ...


class SystemClock:
    """Wall clock backed by ``time.time``."""

    def now(self) -> float:
        return time.time()


class SystemRandomSource:
    """Random bytes from ``os.urandom``; safe to share between threads."""

    def random_bytes(self, size: int) -> bytes:
        return os.urandom(size)


class FixedClock:
    """Clock frozen at a given timestamp."""

    def __init__(self, timestamp: float) -> None:
        self.timestamp = timestamp

    def now(self) -> float:
        return self.timestamp


class FixedRandomSource:
    """Returns the same bytes on every call.

    Only for reproducible output such as test vectors: reusing an IV under
    one key breaks CBC confidentiality.
    """

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)

    def random_bytes(self, size: int) -> bytes:  # noqa: ARG002
        return self.data
