"""Application configuration via pydantic-settings.

Configuration is loaded from environment variables and/or ``.env``
files.  Nested models use ``__`` as the delimiter in env var names,
e.g. ``NTP__HOST=pool.ntp.org``.

The schema covers two concerns:

* **NTP** — reference host, refresh interval, query options, verbosity.
* **Logging** — level, format, optional file sink, rotation.

Applications embedding clockoffset may subclass :class:`Settings` and
add their own ``env_prefix`` and fields.

All durations are in **seconds**.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from clockoffset._config import NtpConfig, QueryOptions

# -------------------------------------------------------------------
# Sub-models (BaseModel, NOT BaseSettings — nested via composition)
# -------------------------------------------------------------------


class NtpSettings(BaseModel):
    """Reference time source and refresh schedule.

    Environment variables (with ``__`` nesting)::

        NTP__HOST=pool.ntp.org
        NTP__INTERVAL=60
        NTP__VERSION=3
        NTP__PORT=123
        NTP__TIMEOUT=5
        NTP__VERBOSE=true
    """

    host: str = Field(
        default="",
        description="NTP server hostname or IP address. Empty disables sync.",
    )
    interval: Annotated[float, Field(gt=0)] = Field(
        default=60.0,
        description="Seconds between refreshes.",
    )
    version: Annotated[int, Field(ge=1, le=4)] = Field(
        default=3,
        description="NTP protocol version sent in requests.",
    )
    port: Annotated[int, Field(ge=1, le=65535)] = Field(
        default=123,
        description="NTP server UDP port.",
    )
    timeout: Annotated[float, Field(gt=0)] = Field(
        default=5.0,
        description="Seconds to wait for each reply.",
    )
    verbose: bool = Field(
        default=False,
        description="Log worker lifecycle and every refreshed offset.",
    )

    def to_config(self) -> NtpConfig:
        """Build the worker's :class:`~clockoffset.NtpConfig`."""
        return NtpConfig(
            host=self.host,
            interval=timedelta(seconds=self.interval),
            query_options=QueryOptions(
                version=self.version,
                port=self.port,
                timeout=self.timeout,
            ),
            verbose=self.verbose,
        )


class LoggingSettings(BaseModel):
    """Logging configuration.

    When ``file`` is set, logs are also written to a rotating file
    (size-based rotation, ``backup_count`` generations kept).  When
    ``None``, logs go to stderr only.

    The ``format`` field selects the output format:

    - ``"json"`` (default) — structured JSON lines for log aggregators.
    - ``"text"`` — human-readable timestamped lines for terminals.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level.",
    )
    format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format: 'json' lines or human-readable 'text'.",
    )
    file: str | None = Field(
        default=None,
        description="Optional log file path. ``None`` means stderr only.",
    )
    max_file_size_mb: Annotated[int, Field(ge=1)] = Field(
        default=10,
        description="Maximum log file size in megabytes before rotation.",
    )
    backup_count: Annotated[int, Field(ge=0)] = Field(
        default=3,
        description="Number of rotated log files to keep.",
    )


# -------------------------------------------------------------------
# Root settings
# -------------------------------------------------------------------


class Settings(BaseSettings):
    """Root settings for clockoffset.

    Loaded from environment variables with the nested delimiter ``__``
    and an optional ``.env`` file in the working directory.

    Example ``.env``::

        NTP__HOST=time.example.org
        NTP__INTERVAL=30
        LOGGING__LEVEL=DEBUG
        LOGGING__FORMAT=text
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    """No ``env_prefix`` is set, so every environment variable is seen;
    ``extra="ignore"`` keeps unrelated ones from failing validation."""

    ntp: NtpSettings = Field(
        default_factory=NtpSettings,
        description="Reference time source settings.",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration.",
    )
