"""Public test-support utilities for clockoffset.

Provided symbols:

- :class:`FakeQuery` — scripted query double with a thread-safe call log.
- :class:`FakeClock` — deterministic monotonic clock.
- :func:`make_settings` — factory for ``Settings`` without ``.env`` files.
"""

from clockoffset.testing._clock import FakeClock
from clockoffset.testing._query import FakeQuery
from clockoffset.testing._settings import make_settings

__all__ = [
    "FakeClock",
    "FakeQuery",
    "make_settings",
]
