"""Background worker that keeps the clock offset fresh.

Lifecycle::

    IDLE ──start()──▶ RUNNING ──stop()──▶ IDLE

``start()`` performs one refresh on the caller's thread before returning,
so an offset is available immediately regardless of the interval.  This
can block the caller for one query round-trip (bounded only by
``QueryOptions.timeout``).  It then launches a daemon thread that
refreshes once per tick.

Tick scheduling is fixed-rate on a monotonic clock.  A refresh that
overruns one or more ticks causes those ticks to be dropped, so attempts
never overlap and never run back to back to catch up.

Every refresh runs behind a fault barrier: query failures and unexpected
exceptions are logged and recorded, the published offset is left alone,
and the loop carries on with the next tick.

Policies for misuse:

- ``start()`` with a disabled config (empty host) logs a warning and
  does nothing.
- ``start()`` while already running logs a warning and does nothing.
- ``stop()`` while idle does nothing.

``stop()`` only signals the thread.  An in-flight query is not
interrupted and its result is still published; use :meth:`SyncWorker.join`
to wait for the thread to exit.
"""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from types import TracebackType
from typing import Self

from clockoffset._clock import ClockPort, SystemClock
from clockoffset._config import NtpConfig, should_start
from clockoffset._errors import QueryError, RefreshFailure, build_refresh_failure
from clockoffset._offset import OffsetStore, default_store
from clockoffset._query import NtpQuery, QueryFunc, QueryPort, as_query_func

logger = logging.getLogger(__name__)


class WorkerState(enum.Enum):
    """Lifecycle state of a :class:`SyncWorker`."""

    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True, slots=True)
class WorkerStats:
    """Counters describing a worker's refresh history."""

    attempts: int = 0
    successes: int = 0
    failures: int = 0
    last_failure: RefreshFailure | None = None


def next_deadline(deadline: float, now: float, interval: float) -> float:
    """Return the first tick after *now* on the grid anchored at *deadline*.

    Ticks missed while a refresh overran are skipped rather than queued.
    """
    deadline += interval
    if deadline <= now:
        missed = int((now - deadline) // interval) + 1
        deadline += missed * interval
    return deadline


class SyncWorker:
    """Periodically queries a reference source and publishes the offset.

    Args:
        config: Host, interval, query options and verbosity.
        query: Query collaborator (a :class:`QueryPort` or plain
            callable).  Defaults to :class:`NtpQuery`.
        store: Where offsets are published.  Defaults to the
            process-wide store read by :func:`get_clock_offset`.
        clock: Monotonic clock for tick scheduling.
        wall_clock: Callable returning an aware ``datetime``, used to
            timestamp failure records.
    """

    def __init__(
        self,
        config: NtpConfig,
        *,
        query: QueryPort | QueryFunc | None = None,
        store: OffsetStore | None = None,
        clock: ClockPort | None = None,
        wall_clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._query = as_query_func(query if query is not None else NtpQuery())
        self._store = store if store is not None else default_store()
        self._clock = clock if clock is not None else SystemClock()
        self._wall_clock = wall_clock
        self._lifecycle_lock = threading.Lock()
        self._refresh_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._stats = WorkerStats()
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None

    # -- Introspection ------------------------------------------------------

    @property
    def config(self) -> NtpConfig:
        return self._config

    @property
    def store(self) -> OffsetStore:
        return self._store

    @property
    def state(self) -> WorkerState:
        """``RUNNING`` while the tick thread is alive and not told to stop."""
        event = self._stop_event
        thread = self._thread
        if event is None or event.is_set():
            return WorkerState.IDLE
        if thread is None or not thread.is_alive():
            return WorkerState.IDLE
        return WorkerState.RUNNING

    @property
    def running(self) -> bool:
        return self.state is WorkerState.RUNNING

    @property
    def stats(self) -> WorkerStats:
        return self._stats

    # -- Lifecycle ----------------------------------------------------------

    def start(self) -> Self:
        """Refresh once, then start ticking in the background.

        Returns ``self`` so ``worker = SyncWorker(cfg).start()`` reads
        naturally.
        """
        config = self._config
        if not should_start(config):
            logger.warning("Clock sync disabled (no host configured); not starting")
            return self
        with self._lifecycle_lock:
            if self.running:
                logger.warning(
                    "Clock sync worker for %s already running; start ignored",
                    config.host,
                    extra={"host": config.host},
                )
                return self
            if config.verbose:
                logger.info(
                    "Clock sync worker starting (host=%s, interval=%s)",
                    config.host,
                    config.interval,
                    extra={"host": config.host},
                )
            self.refresh_once()
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(stop_event,),
                name=f"clockoffset-{config.host}",
                daemon=True,
            )
            self._stop_event = stop_event
            self._thread = thread
            thread.start()
        return self

    def stop(self) -> None:
        """Signal the background thread to exit.  No-op when idle."""
        with self._lifecycle_lock:
            event = self._stop_event
            if event is None or event.is_set():
                return
            if self._config.verbose:
                logger.info(
                    "Stopping clock sync worker for %s",
                    self._config.host,
                    extra={"host": self._config.host},
                )
            event.set()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the background thread to exit.

        Returns:
            ``True`` if no thread is alive when the call returns.
        """
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def __enter__(self) -> Self:
        return self.start()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

    # -- Refresh ------------------------------------------------------------

    def refresh_once(self) -> bool:
        """Run one refresh attempt behind the fault barrier.

        Returns:
            ``True`` if a new offset was published.
        """
        config = self._config
        with self._refresh_lock:
            try:
                result = self._query(config.host, config.query_options)
                offset: timedelta = result.offset
                self._store.set(offset)
            except QueryError as exc:
                logger.error(
                    "Error querying %s: %s",
                    config.host,
                    exc.detail,
                    extra={"host": config.host},
                )
                self._record_failure(exc)
                return False
            except Exception as exc:
                logger.exception(
                    "Unexpected fault while refreshing clock offset from %s",
                    config.host,
                    extra={"host": config.host},
                )
                self._record_failure(exc)
                return False
        if config.verbose:
            logger.info(
                "Got clock offset from %s: %s",
                config.host,
                offset,
                extra={"host": config.host, "offset_s": offset.total_seconds()},
            )
        self._record_success()
        return True

    def _run(self, stop_event: threading.Event) -> None:
        verbose = self._config.verbose
        extra = {"host": self._config.host}
        if verbose:
            logger.info("Clock sync worker running", extra=extra)
        interval = self._config.interval.total_seconds()
        deadline = self._clock.now() + interval
        while not stop_event.wait(max(0.0, deadline - self._clock.now())):
            self.refresh_once()
            deadline = next_deadline(deadline, self._clock.now(), interval)
        if verbose:
            logger.info("Clock sync worker exiting", extra=extra)

    def _record_success(self) -> None:
        with self._stats_lock:
            self._stats = replace(
                self._stats,
                attempts=self._stats.attempts + 1,
                successes=self._stats.successes + 1,
            )

    def _record_failure(self, exc: Exception) -> None:
        failure = build_refresh_failure(
            exc, host=self._config.host, clock=self._wall_clock
        )
        with self._stats_lock:
            self._stats = replace(
                self._stats,
                attempts=self._stats.attempts + 1,
                failures=self._stats.failures + 1,
                last_failure=failure,
            )


# ---------------------------------------------------------------------------
# Process-wide worker
# ---------------------------------------------------------------------------

_default_lock = threading.Lock()
_default_worker: SyncWorker | None = None


def start_ntp_worker(
    config: NtpConfig | None,
    *,
    query: QueryPort | QueryFunc | None = None,
    store: OffsetStore | None = None,
) -> SyncWorker | None:
    """Start the process-wide worker for *config*.

    Returns ``None`` without doing anything when :func:`should_start` is
    false.  When the process-wide worker is already running it is
    returned unchanged and *config* is ignored; stop it first to switch
    hosts.
    """
    global _default_worker  # noqa: PLW0603
    if config is None or not should_start(config):
        logger.debug("Clock sync disabled; process-wide worker not started")
        return None
    with _default_lock:
        if _default_worker is not None and _default_worker.running:
            logger.warning(
                "Clock sync worker for %s already running; start ignored",
                _default_worker.config.host,
                extra={"host": _default_worker.config.host},
            )
            return _default_worker
        worker = SyncWorker(config, query=query, store=store)
        _default_worker = worker
        worker.start()
    return worker


def stop_ntp_worker(worker: SyncWorker | None = None) -> None:
    """Stop *worker*, or the process-wide worker when none is given."""
    with _default_lock:
        target = worker if worker is not None else _default_worker
    if target is None:
        return
    target.stop()
