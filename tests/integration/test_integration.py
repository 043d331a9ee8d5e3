"""Integration tests — worker, store and span clock running together.

Drives a real background thread on a short interval with a scripted
collaborator, then reads the offset the way a tracing layer would.

Test Techniques Used:
    - Integration Testing: end-to-end refresh schedule with real threads
    - Scenario Testing: scripted success / error / success sequence
    - State-based Testing: offset observed at each tick boundary
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import timedelta

import pytest

import clockoffset
from clockoffset import (
    OffsetClock,
    OffsetStore,
    QueryError,
    QueryOptions,
    QueryResult,
    SyncWorker,
    new_config,
)
from clockoffset.testing import FakeClock, FakeQuery

pytestmark = pytest.mark.integration

HOST = "time.example.org"


@pytest.fixture
def scripted() -> FakeQuery:
    """+250 ms, -50 ms, error, +10 ms; every later call fails."""
    return FakeQuery(
        outcomes=[
            timedelta(milliseconds=250),
            timedelta(milliseconds=-50),
            QueryError(HOST, "i/o timeout"),
            timedelta(milliseconds=10),
        ],
    )


class TestRefreshScenario:
    def test_offset_at_each_tick_boundary(
        self, scripted: FakeQuery, offset_store: OffsetStore
    ) -> None:
        """Each call sees the value left by the attempt before it."""
        observed: list[timedelta] = []

        def query(host: str, options: QueryOptions) -> QueryResult:
            observed.append(offset_store.get())
            return scripted.query(host, options)

        config = new_config(HOST).with_interval(timedelta(milliseconds=10))
        worker = SyncWorker(config, query=query, store=offset_store)
        worker.start()
        assert offset_store.get() == timedelta(milliseconds=250)

        try:
            assert scripted.wait_for_calls(5)
        finally:
            worker.stop()
            assert worker.join(timeout=2.0)

        assert observed[:5] == [
            timedelta(0),
            timedelta(milliseconds=250),
            timedelta(milliseconds=-50),
            timedelta(milliseconds=-50),
            timedelta(milliseconds=10),
        ]
        assert offset_store.get() == timedelta(milliseconds=10)

        calls_after_stop = scripted.call_count
        assert not scripted.wait_for_calls(calls_after_stop + 1, timeout=0.1)
        assert offset_store.get() == timedelta(milliseconds=10)


@pytest.mark.usefixtures("_reset_default_store")
class TestProcessWideFlow:
    @pytest.fixture
    def _stop_default_worker(self) -> Iterator[None]:
        yield
        clockoffset.stop_ntp_worker()

    @pytest.mark.usefixtures("_stop_default_worker")
    def test_tracing_layer_reads_published_offset(self) -> None:
        """start → get_clock_offset → OffsetClock, on the default store."""
        query = FakeQuery(default=timedelta(seconds=2))
        config = new_config(HOST).with_interval(timedelta(minutes=10))

        worker = clockoffset.start_ntp_worker(config, query=query)

        assert worker is not None
        assert clockoffset.get_clock_offset() == timedelta(seconds=2)
        assert clockoffset.get_time_offset() == timedelta(seconds=2)

        local = clockoffset.StandardClock(clock=FakeClock())
        corrected = OffsetClock(clock=FakeClock())
        local_start, _ = local.start()
        corrected_start, watch = corrected.start()
        skew = corrected_start - local_start
        assert timedelta(seconds=1) < skew < timedelta(seconds=3)
        assert watch.stop(corrected_start) == corrected_start
