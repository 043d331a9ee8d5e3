"""Thread-safe store for the last known clock offset.

The offset is ``reference time - local time``: add it to a local
timestamp to get an estimate of reference time.

One writer (the sync worker thread) and any number of readers (span
timestamping on arbitrary threads) share the store.  Each publish swaps
in a new immutable :class:`OffsetSnapshot`, so a reader always sees an
offset together with the timestamp and counter that belong to it.

A process-wide default store backs the module-level accessors
:func:`get_clock_offset`, :func:`get_time_offset` and
:func:`set_time_offset`.  The two getter names are aliases; both read the
same value.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

_ZERO = timedelta(0)


@dataclass(frozen=True, slots=True)
class OffsetSnapshot:
    """Immutable view of the store at one point in time.

    Attributes:
        offset: Last successfully published offset (zero if never synced).
        synced_at: Wall-clock time of that publish, ``None`` if never synced.
        updates: Number of publishes so far.
    """

    offset: timedelta = _ZERO
    synced_at: datetime | None = None
    updates: int = 0

    @property
    def synced(self) -> bool:
        """Whether at least one offset has been published."""
        return self.synced_at is not None

    def age(self, now: datetime | None = None) -> timedelta | None:
        """Return the time elapsed since the last publish.

        Returns ``None`` when nothing has been published yet, so callers
        can tell "never synced" apart from "synced to exactly zero".
        """
        if self.synced_at is None:
            return None
        current = now if now is not None else datetime.now(UTC)
        return current - self.synced_at


class OffsetStore:
    """Holds the most recently published clock offset.

    Args:
        wall_clock: Callable returning the current aware ``datetime``,
            used to stamp ``synced_at``.  Defaults to ``datetime.now(UTC)``.
    """

    def __init__(
        self,
        *,
        wall_clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._snapshot = OffsetSnapshot()
        self._wall_clock = wall_clock or (lambda: datetime.now(UTC))

    def get(self) -> timedelta:
        """Return the current offset, ``timedelta(0)`` before the first set."""
        return self._snapshot.offset

    def set(self, offset: timedelta) -> None:
        """Publish *offset*, replacing the previous value.

        Raises:
            TypeError: If *offset* is not a :class:`~datetime.timedelta`.
        """
        if not isinstance(offset, timedelta):
            msg = f"offset must be a timedelta, got {type(offset).__name__}"
            raise TypeError(msg)
        stamped = self._wall_clock()
        with self._lock:
            self._snapshot = OffsetSnapshot(
                offset=offset,
                synced_at=stamped,
                updates=self._snapshot.updates + 1,
            )

    def snapshot(self) -> OffsetSnapshot:
        """Return the current snapshot (offset, sync time, update count)."""
        return self._snapshot

    def reset(self) -> None:
        """Forget every published value.  Intended for tests."""
        with self._lock:
            self._snapshot = OffsetSnapshot()


# ---------------------------------------------------------------------------
# Process-wide default store
# ---------------------------------------------------------------------------

_default_store = OffsetStore()


def default_store() -> OffsetStore:
    """Return the process-wide store used when none is injected."""
    return _default_store


def get_clock_offset() -> timedelta:
    """Return the process-wide clock offset."""
    return _default_store.get()


def get_time_offset() -> timedelta:
    """Alias of :func:`get_clock_offset`."""
    return _default_store.get()


def set_time_offset(offset: timedelta) -> bool:
    """Publish *offset* to the process-wide store.

    Always returns ``True``; the status return exists so callers written
    against a fallible setter keep working.
    """
    _default_store.set(offset)
    return True
