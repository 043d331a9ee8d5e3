"""Worker configuration value objects.

:class:`NtpConfig` is built once at startup and then owned, read-only,
by a :class:`~clockoffset.SyncWorker`.  The ``with_*`` methods return a
*new* config, so a fluent chain reads like a builder while every
instance stays immutable::

    config = (
        new_config("pool.ntp.org")
        .with_interval(30)
        .with_verbose(True)
    )

An empty host means synchronisation is disabled; :func:`should_start`
is the gate callers check before starting a worker.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import timedelta

DEFAULT_INTERVAL = timedelta(minutes=1)


@dataclass(frozen=True, slots=True)
class QueryOptions:
    """Options handed through, untouched, to the query collaborator.

    Attributes:
        version: NTP protocol version.
        port: UDP port of the reference server.
        timeout: Seconds to wait for a reply.  The worker imposes no
            deadline of its own; this is the only timeout on a query.
    """

    version: int = 3
    port: int = 123
    timeout: float = 5.0


@dataclass(frozen=True, slots=True)
class NtpConfig:
    """Configuration for one sync worker.

    Raises:
        TypeError: If *interval* is not a ``timedelta``.
        ValueError: If *interval* is not positive.
    """

    host: str
    interval: timedelta = DEFAULT_INTERVAL
    query_options: QueryOptions = field(default_factory=QueryOptions)
    verbose: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.interval, timedelta):
            msg = f"interval must be a timedelta, got {type(self.interval).__name__}"
            raise TypeError(msg)
        if self.interval <= timedelta(0):
            msg = f"interval must be positive, got {self.interval}"
            raise ValueError(msg)

    def with_interval(self, interval: timedelta | float) -> NtpConfig:
        """Return a copy refreshing every *interval* (``timedelta`` or seconds).

        Raises:
            ValueError: If the interval is not positive.
        """
        if not isinstance(interval, timedelta):
            interval = timedelta(seconds=interval)
        return replace(self, interval=interval)

    def with_verbose(self, verbose: bool) -> NtpConfig:
        return replace(self, verbose=verbose)

    def with_query_options(self, options: QueryOptions) -> NtpConfig:
        return replace(self, query_options=options)


def new_config(host: str) -> NtpConfig:
    """Start a config for *host* with a one-minute interval."""
    return NtpConfig(host=host)


def should_start(config: NtpConfig | None) -> bool:
    """Return whether a worker should be started for *config*.

    ``False`` when *config* is ``None`` or its host is empty.
    """
    if config is None:
        return False
    return config.host != ""
