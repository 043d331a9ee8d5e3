"""Span clocks: where a tracing layer gets its start and end timestamps.

A :class:`Clock` hands out a start timestamp together with a
:class:`Stopwatch` bound to that instant.  When the span ends, the
stopwatch turns the start timestamp into an end timestamp::

    start, watch = clock.start()
    ...  # traced work
    end = watch.stop(start)

End timestamps are ``start + monotonic elapsed``, never a second wall
clock reading, so a wall-clock step mid-span cannot produce a negative
or inflated duration.

:class:`StandardClock` uses the untouched system clock.
:class:`OffsetClock` shifts the start timestamp by the offset currently
published in an :class:`~clockoffset.OffsetStore`.  Call sites only see
the :class:`Clock` protocol, so either can be swapped in.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Protocol, runtime_checkable

from clockoffset._clock import ClockPort, SystemClock
from clockoffset._offset import OffsetStore, default_store

WallClock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


@runtime_checkable
class Stopwatch(Protocol):
    """Turns a span's start timestamp into its end timestamp."""

    def stop(self, start: datetime) -> datetime: ...


@runtime_checkable
class Clock(Protocol):
    """Provides span start timestamps and matching stopwatches."""

    def start(self) -> tuple[datetime, Stopwatch]: ...


class StandardStopwatch:
    """Stopwatch measuring elapsed time on a monotonic clock.

    Args:
        clock: Monotonic clock; the stopwatch reads it once now and once
            in :meth:`stop`.
    """

    def __init__(self, clock: ClockPort) -> None:
        self._clock = clock
        self._started = clock.now()

    def stop(self, start: datetime) -> datetime:
        """Return *start* advanced by the monotonic time elapsed since creation."""
        return start + timedelta(seconds=self._clock.now() - self._started)


class StandardClock:
    """Clock using the system time with no offset correction."""

    def __init__(
        self,
        *,
        clock: ClockPort | None = None,
        wall_clock: WallClock | None = None,
    ) -> None:
        self._clock = clock if clock is not None else SystemClock()
        self._wall_clock = wall_clock or _utc_now

    def start(self) -> tuple[datetime, Stopwatch]:
        return self._wall_clock(), StandardStopwatch(self._clock)


class OffsetClock(StandardClock):
    """Clock that corrects start timestamps by the published offset.

    The offset is read once per span, so a refresh landing mid-span does
    not change the span's duration.

    Args:
        store: Offset source.  Defaults to the process-wide store.
    """

    def __init__(
        self,
        store: OffsetStore | None = None,
        *,
        clock: ClockPort | None = None,
        wall_clock: WallClock | None = None,
    ) -> None:
        super().__init__(clock=clock, wall_clock=wall_clock)
        self._store = store if store is not None else default_store()

    def start(self) -> tuple[datetime, Stopwatch]:
        now, watch = super().start()
        return now + self._store.get(), watch


def default_clock() -> Clock:
    """Return the clock used when the caller does not supply one."""
    return StandardClock()
