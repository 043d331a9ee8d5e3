"""clockoffset.

Keeps an approximate offset between the local clock and a reference time
source, refreshed in the background, for timestamping trace spans.
"""

from importlib.metadata import PackageNotFoundError, version

from clockoffset._clock import ClockPort, SystemClock
from clockoffset._config import (
    DEFAULT_INTERVAL,
    NtpConfig,
    QueryOptions,
    new_config,
    should_start,
)
from clockoffset._errors import (
    ClockOffsetError,
    QueryError,
    RefreshFailure,
    build_refresh_failure,
)
from clockoffset._logging import JsonFormatter, configure_logging
from clockoffset._offset import (
    OffsetSnapshot,
    OffsetStore,
    default_store,
    get_clock_offset,
    get_time_offset,
    set_time_offset,
)
from clockoffset._query import NtpQuery, NullQuery, QueryFunc, QueryPort, QueryResult
from clockoffset._settings import LoggingSettings, NtpSettings, Settings
from clockoffset._timesource import (
    Clock,
    OffsetClock,
    StandardClock,
    StandardStopwatch,
    Stopwatch,
    default_clock,
)
from clockoffset._worker import (
    SyncWorker,
    WorkerState,
    WorkerStats,
    start_ntp_worker,
    stop_ntp_worker,
)

try:
    __version__ = version("clockoffset")
except PackageNotFoundError:
    # Source checkout without installed metadata
    __version__ = "0.0.0+unknown"

__all__ = [
    # Version
    "__version__",
    # Monotonic clock
    "ClockPort",
    "SystemClock",
    # Config
    "DEFAULT_INTERVAL",
    "NtpConfig",
    "QueryOptions",
    "new_config",
    "should_start",
    # Errors
    "ClockOffsetError",
    "QueryError",
    "RefreshFailure",
    "build_refresh_failure",
    # Logging
    "JsonFormatter",
    "configure_logging",
    # Offset store
    "OffsetSnapshot",
    "OffsetStore",
    "default_store",
    "get_clock_offset",
    "get_time_offset",
    "set_time_offset",
    # Query
    "NtpQuery",
    "NullQuery",
    "QueryFunc",
    "QueryPort",
    "QueryResult",
    # Settings
    "LoggingSettings",
    "NtpSettings",
    "Settings",
    # Span clocks
    "Clock",
    "OffsetClock",
    "StandardClock",
    "StandardStopwatch",
    "Stopwatch",
    "default_clock",
    # Worker
    "SyncWorker",
    "WorkerState",
    "WorkerStats",
    "start_ntp_worker",
    "stop_ntp_worker",
]
