"""Exception types and refresh-failure records.

A refresh attempt can fail in two ways:

- **Query failure** — the reference source could not be reached or sent a
  bad reply.  Query adapters raise :class:`QueryError`.
- **Fault** — any other exception escaping the query path (a bug in a
  custom adapter, an unexpected ``None``).

The worker treats both identically: the failure is logged, recorded as a
:class:`RefreshFailure`, and the published offset stays untouched.
Nothing is propagated to the caller of ``start()`` or to the tick loop.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import UTC, datetime


class ClockOffsetError(Exception):
    """Base class for all clockoffset errors."""


class QueryError(ClockOffsetError):
    """The reference time source could not produce an offset.

    Args:
        host: The queried host.
        message: Human-readable failure detail.
    """

    def __init__(self, host: str, message: str) -> None:
        super().__init__(f"error querying {host}: {message}")
        self.host = host
        self.detail = message


@dataclass(frozen=True, slots=True)
class RefreshFailure:
    """Immutable record of one failed refresh attempt."""

    error_type: str
    message: str
    host: str
    timestamp: str

    def to_dict(self) -> dict[str, str]:
        """Serialise to a plain dictionary."""
        return asdict(self)


def build_refresh_failure(
    error: Exception,
    *,
    host: str,
    clock: Callable[[], datetime] | None = None,
) -> RefreshFailure:
    """Convert an exception raised during a refresh into a record.

    :class:`QueryError` maps to ``"query_error"``; every other exception
    type is a ``"fault"``.

    Args:
        error: The exception caught by the fault barrier.
        host: The host that was being queried.
        clock: Optional callable returning a :class:`~datetime.datetime`.
            Defaults to ``datetime.now(UTC)``.
    """
    error_type = "query_error" if isinstance(error, QueryError) else "fault"
    now = clock() if clock is not None else datetime.now(UTC)
    return RefreshFailure(
        error_type=error_type,
        message=str(error) or type(error).__name__,
        host=host,
        timestamp=now.isoformat(),
    )
