"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

# The clockoffset testing plugin is registered via a ``pytest11`` entry
# point (pyproject.toml) for external consumers.  In our own test suite
# we disable it (``-p no:clockoffset``) and load it explicitly here, so
# that the clockoffset import chain happens after ``pytest-cov`` starts
# tracing.
pytest_plugins = ["clockoffset.testing._plugin"]


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (real threads and timing)"
    )


@pytest.fixture
def _reset_default_store() -> Iterator[None]:
    """Clear the process-wide offset store before and after a test."""
    from clockoffset._offset import default_store

    default_store().reset()
    yield
    default_store().reset()
