"""Monotonic clock port and system adapter.

The sync worker schedules its ticks and the standard stopwatch measures
span durations against a monotonic source.  ``time.monotonic()`` never
jumps when the wall clock is stepped (by an NTP daemon, by an operator),
which matters here: the very thing this package tracks is the wall clock
being wrong.  Only *differences* between two ``now()`` readings carry
meaning (PEP 418).
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class ClockPort(Protocol):
    """Monotonic seconds source.

    Injected into :class:`~clockoffset.SyncWorker` and the span clocks so
    tests can substitute a deterministic fake.
    """

    def now(self) -> float:
        """Return monotonic time in seconds from an arbitrary epoch."""
        ...


class SystemClock:
    """Production :class:`ClockPort` backed by ``time.monotonic()``."""

    def now(self) -> float:
        return time.monotonic()
