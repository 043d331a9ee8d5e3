"""Unit tests for clockoffset._logging — JSON formatter and config.

Test Techniques Used:
    - Specification-based Testing: JsonFormatter output schema
    - State Inspection: Root logger handler/level after configure
    - Fixture Isolation: Save/restore root logger state
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from collections.abc import Iterator
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from clockoffset._logging import JsonFormatter, configure_logging
from clockoffset._settings import LoggingSettings


@pytest.fixture
def _restore_root_logger() -> Iterator[None]:
    """Save and restore root logger handlers and level."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    for h in root.handlers:
        if h not in original_handlers:
            h.close()
    root.handlers = original_handlers
    root.setLevel(original_level)


def _record(
    message: str = "Got clock offset from %s: %s",
    args: tuple[object, ...] = ("time.example.org", "0:00:00.250000"),
    level: int = logging.INFO,
) -> logging.LogRecord:
    return logging.LogRecord(
        name="clockoffset._worker",
        level=level,
        pathname="_worker.py",
        lineno=1,
        msg=message,
        args=args,
        exc_info=None,
    )


class TestJsonFormatter:
    """Technique: Specification-based Testing — JSON schema."""

    def test_required_fields(self) -> None:
        result = json.loads(JsonFormatter(service="svc").format(_record()))
        assert result["level"] == "INFO"
        assert result["logger"] == "clockoffset._worker"
        assert result["message"] == (
            "Got clock offset from time.example.org: 0:00:00.250000"
        )
        assert result["service"] == "svc"

    def test_timestamp_is_utc_iso8601(self) -> None:
        result = json.loads(JsonFormatter().format(_record()))
        assert datetime.fromisoformat(result["timestamp"]).tzinfo == UTC

    def test_thread_name_included(self) -> None:
        result = json.loads(JsonFormatter().format(_record()))
        assert result["thread"] == threading.current_thread().name

    def test_version_only_when_set(self) -> None:
        with_version = json.loads(JsonFormatter(version="1.2.3").format(_record()))
        without = json.loads(JsonFormatter().format(_record()))
        assert with_version["version"] == "1.2.3"
        assert "version" not in without

    def test_worker_context_fields_included(self) -> None:
        record = _record()
        record.host = "time.example.org"
        record.offset_s = 0.25

        result = json.loads(JsonFormatter().format(record))

        assert result["host"] == "time.example.org"
        assert result["offset_s"] == 0.25

    def test_context_fields_omitted_when_absent(self) -> None:
        result = json.loads(JsonFormatter().format(_record()))
        assert "host" not in result
        assert "offset_s" not in result

    def test_context_fields_from_logger_extra(self) -> None:
        """Fields passed through ``extra=`` reach the JSON line."""
        records: list[logging.LogRecord] = []
        handler = logging.Handler()
        handler.emit = records.append  # type: ignore[method-assign]
        log = logging.getLogger("clockoffset.test_extra")
        log.addHandler(handler)
        log.propagate = False
        try:
            log.warning("Error querying %s", "h", extra={"host": "h"})
        finally:
            log.removeHandler(handler)
            log.propagate = True

        result = json.loads(JsonFormatter().format(records[0]))
        assert result["host"] == "h"
        assert "offset_s" not in result

    def test_exception_traceback_on_one_line(self) -> None:
        fmt = JsonFormatter(service="svc")
        record = _record("Unexpected fault", args=(), level=logging.ERROR)
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record.exc_info = sys.exc_info()

        output = fmt.format(record)

        assert "\n" not in output
        assert "RuntimeError: boom" in json.loads(output)["exception"]

    def test_stack_info_included_when_present(self) -> None:
        record = _record()
        record.stack_info = "Stack trace here"
        result = json.loads(JsonFormatter().format(record))
        assert "Stack trace" in result["stack_info"]


@pytest.mark.usefixtures("_restore_root_logger")
class TestConfigureLogging:
    """Technique: State Inspection — root logger after configuration."""

    def test_json_mode_sets_json_formatter(self) -> None:
        configure_logging(LoggingSettings(format="json"), service="test")
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, JsonFormatter)

    def test_text_mode_sets_standard_formatter(self) -> None:
        configure_logging(LoggingSettings(format="text"), service="test")
        handler = logging.getLogger().handlers[0]
        assert not isinstance(handler.formatter, JsonFormatter)

    def test_sets_root_logger_level(self) -> None:
        configure_logging(LoggingSettings(level="WARNING"), service="test")
        assert logging.getLogger().level == logging.WARNING

    def test_clears_existing_handlers(self) -> None:
        root = logging.getLogger()
        dummy = logging.StreamHandler()
        root.addHandler(dummy)

        configure_logging(LoggingSettings(), service="test")

        assert dummy not in root.handlers

    def test_file_handler_uses_size_and_backups(self, tmp_path: Path) -> None:
        settings = LoggingSettings(
            file=str(tmp_path / "clockoffset.log"),
            max_file_size_mb=2,
            backup_count=5,
        )
        configure_logging(settings, service="test")

        rotating = [
            h for h in logging.getLogger().handlers
            if isinstance(h, RotatingFileHandler)
        ]
        assert len(rotating) == 1
        assert rotating[0].maxBytes == 2 * 1024 * 1024
        assert rotating[0].backupCount == 5

    def test_no_file_handler_by_default(self) -> None:
        configure_logging(LoggingSettings(), service="test")
        assert not any(
            isinstance(h, RotatingFileHandler) for h in logging.getLogger().handlers
        )
