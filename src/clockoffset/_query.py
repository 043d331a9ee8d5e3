"""Reference-time query port and adapters.

Provides :class:`QueryPort` (Protocol) and two implementations:

- :class:`NtpQuery` — asks an NTP server via ``ntplib``
- :class:`NullQuery` — always fails; a placeholder when no source is set

The worker also accepts any plain callable with the same signature as
:meth:`QueryPort.query`.  Test doubles live in :mod:`clockoffset.testing`.

``ntplib`` is imported lazily inside :meth:`NtpQuery.query` so the store,
worker and test doubles work without it installed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Protocol, runtime_checkable

from clockoffset._config import QueryOptions
from clockoffset._errors import QueryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class QueryResult:
    """Outcome of one successful query.

    Attributes:
        offset: Reference time minus local time.
        delay: Round-trip delay, when the source reports one.
    """

    offset: timedelta
    delay: timedelta | None = None


@runtime_checkable
class QueryPort(Protocol):
    """Port contract for asking a reference source for the clock offset.

    Implementations raise on failure, preferably :class:`QueryError`.
    """

    def query(self, host: str, options: QueryOptions) -> QueryResult: ...


QueryFunc = Callable[[str, QueryOptions], QueryResult]
"""Plain-callable form of :meth:`QueryPort.query`."""


class NtpQuery:
    """:class:`QueryPort` backed by :class:`ntplib.NTPClient`."""

    def __init__(self, client: Any | None = None) -> None:
        self._client = client

    def query(self, host: str, options: QueryOptions) -> QueryResult:
        """Send one NTP request to *host*.

        Raises:
            QueryError: On network errors or an invalid reply.
        """
        import ntplib  # noqa: PLC0415

        if self._client is None:
            self._client = ntplib.NTPClient()
        try:
            stats = self._client.request(
                host,
                version=options.version,
                port=options.port,
                timeout=options.timeout,
            )
        except (ntplib.NTPException, OSError) as exc:
            raise QueryError(host, str(exc) or type(exc).__name__) from exc
        logger.debug("NTP reply from %s: stratum=%s", host, stats.stratum)
        return QueryResult(
            offset=timedelta(seconds=stats.offset),
            delay=timedelta(seconds=stats.delay),
        )


class NullQuery:
    """:class:`QueryPort` that never succeeds."""

    def query(self, host: str, options: QueryOptions) -> QueryResult:  # noqa: ARG002
        raise QueryError(host, "no reference time source configured")


def as_query_func(query: QueryPort | QueryFunc) -> QueryFunc:
    """Normalise a port object or a plain callable to a callable."""
    if isinstance(query, QueryPort):
        return query.query
    return query
