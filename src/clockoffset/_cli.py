"""Command-line interface (Typer-based).

Two commands:

- ``clockoffset query`` — ask the reference source once and print the
  offset.
- ``clockoffset run`` — start a :class:`~clockoffset.SyncWorker` and keep
  it refreshing until interrupted (or until ``--duration`` elapses).

Both load :class:`~clockoffset.Settings` from the environment / ``.env``
file first and then apply command-line overrides.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from typing import Annotated, get_args

import typer
from pydantic import ValidationError

from clockoffset import __version__
from clockoffset._config import should_start
from clockoffset._logging import configure_logging
from clockoffset._offset import OffsetStore
from clockoffset._query import NtpQuery, QueryFunc, QueryPort, as_query_func
from clockoffset._settings import LoggingSettings, Settings
from clockoffset._worker import SyncWorker

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_DISABLED = 2
EXIT_RUNTIME_ERROR = 3

SERVICE_NAME = "clockoffset"

_VALID_LOG_LEVELS: tuple[str, ...] = get_args(
    LoggingSettings.model_fields["level"].annotation,
)
_VALID_LOG_FORMATS: tuple[str, ...] = get_args(
    LoggingSettings.model_fields["format"].annotation,
)

# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

HostOption = Annotated[
    str | None,
    typer.Option("--host", help="NTP server (overrides NTP__HOST)."),
]
IntervalOption = Annotated[
    float | None,
    typer.Option("--interval", help="Seconds between refreshes."),
]
VerboseOption = Annotated[
    bool | None,
    typer.Option("--verbose/--quiet", help="Log every refresh."),
]
LogLevelOption = Annotated[
    str | None,
    typer.Option("--log-level", help="Override log level."),
]
LogFormatOption = Annotated[
    str | None,
    typer.Option("--log-format", help="Override log format."),
]
EnvFileOption = Annotated[
    str,
    typer.Option("--env-file", help="Path to .env file."),
]


def _load_settings(
    *,
    env_file: str,
    host: str | None,
    interval: float | None,
    verbose: bool | None,
    log_level: str | None,
    log_format: str | None,
) -> Settings:
    """Build settings from the environment and apply CLI overrides."""
    if log_level is not None and log_level.upper() not in _VALID_LOG_LEVELS:
        raise typer.BadParameter(
            f"Invalid log level '{log_level}'. "
            f"Choose from: {', '.join(_VALID_LOG_LEVELS)}",
            param_hint="'--log-level'",
        )
    if log_format is not None and log_format.lower() not in _VALID_LOG_FORMATS:
        raise typer.BadParameter(
            f"Invalid log format '{log_format}'. "
            f"Choose from: {', '.join(_VALID_LOG_FORMATS)}",
            param_hint="'--log-format'",
        )
    if interval is not None and interval <= 0:
        raise typer.BadParameter(
            f"Interval must be positive, got {interval}",
            param_hint="'--interval'",
        )

    try:
        settings = Settings(_env_file=env_file)  # type: ignore[call-arg]
    except ValidationError as exc:
        logger.error("Configuration error: %s", exc)
        raise typer.Exit(EXIT_CONFIG_ERROR) from exc

    ntp_overrides: dict[str, object] = {}
    if host is not None:
        ntp_overrides["host"] = host
    if interval is not None:
        ntp_overrides["interval"] = interval
    if verbose is not None:
        ntp_overrides["verbose"] = verbose
    if ntp_overrides:
        settings.ntp = settings.ntp.model_copy(update=ntp_overrides)

    if log_level is not None:
        settings.logging = settings.logging.model_copy(
            update={"level": log_level.upper()},
        )
    if log_format is not None:
        settings.logging = settings.logging.model_copy(
            update={"format": log_format.lower()},
        )

    configure_logging(settings.logging, service=SERVICE_NAME, version=__version__)
    return settings


def build_cli(query: QueryPort | QueryFunc | None = None) -> typer.Typer:
    """Construct the Typer CLI.

    Args:
        query: Query collaborator used by both commands.  Defaults to
            :class:`~clockoffset.NtpQuery`.
    """
    query_func = as_query_func(query if query is not None else NtpQuery())

    cli = typer.Typer(
        help=f"{SERVICE_NAME} v{__version__} — track the local clock offset",
        no_args_is_help=True,
    )

    @cli.callback(invoke_without_command=True)
    def main(
        ctx: typer.Context,
        version_flag: Annotated[
            bool | None,
            typer.Option(
                "--version",
                is_eager=True,
                help="Show version and exit.",
            ),
        ] = None,
    ) -> None:
        if version_flag:
            typer.echo(f"{SERVICE_NAME} v{__version__}")
            raise typer.Exit()
        if ctx.invoked_subcommand is None:
            typer.echo(ctx.get_help())
            raise typer.Exit()

    @cli.command("query")
    def query_command(
        host: HostOption = None,
        verbose: VerboseOption = None,
        log_level: LogLevelOption = None,
        log_format: LogFormatOption = None,
        env_file: EnvFileOption = ".env",
    ) -> None:
        """Query the reference source once and print the offset."""
        settings = _load_settings(
            env_file=env_file,
            host=host,
            interval=None,
            verbose=verbose,
            log_level=log_level,
            log_format=log_format,
        )
        config = settings.ntp.to_config()
        if not should_start(config):
            typer.echo("No NTP host configured (set NTP__HOST or --host)", err=True)
            raise typer.Exit(EXIT_DISABLED)

        try:
            result = query_func(config.host, config.query_options)
        except Exception as exc:
            logger.error("Runtime error: %s", exc)
            raise typer.Exit(EXIT_RUNTIME_ERROR) from exc

        line = f"{config.host} offset={result.offset.total_seconds():+.6f}s"
        if result.delay is not None:
            line += f" delay={result.delay.total_seconds():.6f}s"
        typer.echo(line)

    @cli.command("run")
    def run_command(
        host: HostOption = None,
        interval: IntervalOption = None,
        verbose: VerboseOption = None,
        duration: Annotated[
            float | None,
            typer.Option(
                "--duration",
                help="Stop after this many seconds (default: run until Ctrl+C).",
            ),
        ] = None,
        log_level: LogLevelOption = None,
        log_format: LogFormatOption = None,
        env_file: EnvFileOption = ".env",
    ) -> None:
        """Keep the offset refreshed in the background until interrupted."""
        settings = _load_settings(
            env_file=env_file,
            host=host,
            interval=interval,
            verbose=verbose,
            log_level=log_level,
            log_format=log_format,
        )
        config = settings.ntp.to_config()
        if not should_start(config):
            typer.echo("No NTP host configured (set NTP__HOST or --host)", err=True)
            raise typer.Exit(EXIT_DISABLED)

        worker = SyncWorker(config, query=query_func, store=OffsetStore())
        worker.start()
        try:
            with contextlib.suppress(KeyboardInterrupt):
                threading.Event().wait(duration)
        finally:
            worker.stop()
            worker.join(timeout=config.query_options.timeout + 1.0)

        snapshot = worker.store.snapshot()
        stats = worker.stats
        typer.echo(
            f"{config.host} offset={snapshot.offset.total_seconds():+.6f}s "
            f"successes={stats.successes} failures={stats.failures}"
        )
        if not snapshot.synced:
            raise typer.Exit(EXIT_RUNTIME_ERROR)

    return cli


def main() -> None:
    """Console-script entry point."""
    build_cli()()
