"""Tests for MonitoringLoop."""

import asyncio

import pytest

from stockwatch.core.exceptions import RepositoryUnavailableError
from stockwatch.core.services import MonitoringLoop

DEBOUNCE = 0.01


class RecordingSink:
    def __init__(self):
        self.batches: list[list[int]] = []

    def __call__(self, alerts):
        self.batches.append([a.item_id for a in alerts])


@pytest.fixture
def stocked_repo(memory_repo, sample_snapshot):
    for item in sample_snapshot:
        memory_repo.add(item)
    return memory_repo


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
async def monitor(stocked_repo, sink):
    loop = MonitoringLoop(
        stocked_repo,
        sinks=[sink],
        interval_seconds=60,
        debounce_seconds=DEBOUNCE,
    )
    yield loop
    loop.stop()
    await loop.drain()


def gate_fetches(repo):
    """Make fetch_under_threshold block until the returned event is set."""
    gate = asyncio.Event()
    entered: list[int] = []
    original = repo.fetch_under_threshold

    async def gated():
        entered.append(1)
        await gate.wait()
        return await original()

    repo.fetch_under_threshold = gated
    return gate, entered


class TestCycles:
    async def test_first_cycle_emits_all_then_nothing_new(self, monitor, sink):
        monitor.start()
        await monitor.drain()

        assert sink.batches == [[1, 2]]
        assert monitor.retained_ids == {1, 2}

        alerts = await monitor.check_now()

        assert [a.item_id for a in alerts] == [1, 2]
        assert sink.batches == [[1, 2]]
        assert monitor.cycle_count == 2

    async def test_periodic_cycles(self, stocked_repo, sink):
        monitor = MonitoringLoop(stocked_repo, sinks=[sink], interval_seconds=0.01)
        monitor.start()
        await asyncio.sleep(0.1)
        monitor.stop()
        await monitor.drain()

        assert stocked_repo.fetch_calls >= 3
        assert sink.batches == [[1, 2]]

    async def test_reappearing_item_is_new_again(self, monitor, stocked_repo, sink):
        monitor.start()
        await monitor.drain()

        stocked_repo.set_stock(2, 100)
        await monitor.check_now()
        assert monitor.retained_ids == {1}

        stocked_repo.set_stock(2, 45)
        await monitor.check_now()

        assert sink.batches == [[1, 2], [2]]

    async def test_current_alerts_and_last_checked(self, monitor):
        assert monitor.last_checked_at is None

        monitor.start()
        await monitor.drain()

        assert [a.item_id for a in monitor.current_alerts] == [1, 2]
        assert monitor.last_checked_at is not None

    async def test_async_sink_is_awaited(self, stocked_repo):
        received = []

        async def async_sink(alerts):
            await asyncio.sleep(0)
            received.extend(a.item_id for a in alerts)

        monitor = MonitoringLoop(stocked_repo, sinks=[async_sink], interval_seconds=60)
        monitor.start()
        await monitor.drain()
        monitor.stop()
        await monitor.drain()

        assert received == [1, 2]

    async def test_failing_sink_does_not_block_others(self, stocked_repo, sink):
        def broken(alerts):
            raise RuntimeError("toast service down")

        monitor = MonitoringLoop(stocked_repo, sinks=[broken, sink], interval_seconds=60)
        monitor.start()
        await monitor.drain()
        monitor.stop()
        await monitor.drain()

        assert sink.batches == [[1, 2]]
        assert monitor.retained_ids == {1, 2}


class TestFailures:
    async def test_repository_error_retains_previous_alerts(self, monitor, stocked_repo, sink):
        monitor.start()
        await monitor.drain()

        stocked_repo.fetch_error = RepositoryUnavailableError("fetch_under_threshold", "locked")
        assert await monitor.check_now() is None

        assert monitor.retained_ids == {1, 2}
        assert [a.item_id for a in monitor.current_alerts] == [1, 2]
        assert monitor.is_running

        stocked_repo.fetch_error = None
        await monitor.check_now()

        assert sink.batches == [[1, 2]]

    async def test_unexpected_error_is_not_fatal(self, monitor, stocked_repo):
        stocked_repo.fetch_error = RuntimeError("boom")
        monitor.start()
        await monitor.drain()

        assert monitor.is_running
        assert monitor.cycle_count == 0

        stocked_repo.fetch_error = None
        assert await monitor.check_now() is not None


class TestOverlap:
    async def test_trigger_during_cycle_is_skipped(self, monitor, stocked_repo):
        gate, entered = gate_fetches(stocked_repo)
        monitor.start()
        await asyncio.sleep(0)

        stocked_repo.notify(1)
        await asyncio.sleep(DEBOUNCE * 5)

        assert len(entered) == 1

        gate.set()
        await monitor.drain()
        await asyncio.sleep(DEBOUNCE * 5)

        assert len(entered) == 1
        assert monitor.cycle_count == 1

    async def test_check_now_during_cycle_defers_to_debounce(self, stocked_repo):
        gate, entered = gate_fetches(stocked_repo)
        monitor = MonitoringLoop(stocked_repo, interval_seconds=60, debounce_seconds=0.1)
        monitor.start()
        await asyncio.sleep(0)

        assert await monitor.check_now() is None

        gate.set()
        await monitor.drain()
        await asyncio.sleep(0.3)
        await monitor.drain()
        monitor.stop()
        await monitor.drain()

        assert len(entered) == 2
        assert monitor.cycle_count == 2


class TestChangeNotifications:
    async def test_burst_is_coalesced(self, monitor, stocked_repo):
        monitor.start()
        await monitor.drain()
        calls = stocked_repo.fetch_calls

        for _ in range(5):
            stocked_repo.notify(1)
        await asyncio.sleep(DEBOUNCE * 5)
        await monitor.drain()

        assert stocked_repo.fetch_calls == calls + 1

    async def test_change_raises_new_alert(self, monitor, stocked_repo, sink, make_item):
        monitor.start()
        await monitor.drain()

        stocked_repo.add(make_item(id=3, name="Staples", current_stock=1, minimum_stock=10))
        stocked_repo.notify(3)
        await asyncio.sleep(DEBOUNCE * 5)
        await monitor.drain()

        assert sink.batches == [[1, 2], [3]]


class TestLifecycle:
    def test_start_requires_running_loop(self, stocked_repo):
        monitor = MonitoringLoop(stocked_repo)
        with pytest.raises(RuntimeError):
            monitor.start()
        assert not monitor.is_running

    async def test_interval_must_be_positive(self, monitor):
        with pytest.raises(ValueError):
            monitor.start(interval_seconds=0)

    async def test_start_twice_returns_same_handle(self, monitor, stocked_repo):
        first = monitor.start()
        second = monitor.start()

        assert first is second
        assert len(stocked_repo.handlers) == 1

    async def test_stop_is_idempotent_and_unsubscribes(self, monitor, stocked_repo):
        handle = monitor.start()
        await monitor.drain()

        monitor.stop(handle)
        monitor.stop(handle)
        handle.cancel()
        monitor.stop()

        assert not monitor.is_running
        assert stocked_repo.handlers == []
        assert await monitor.check_now() is None

    async def test_stop_before_start(self, monitor):
        monitor.stop()
        assert not monitor.is_running

    async def test_stop_mid_debounce_runs_no_cycle(self, monitor, stocked_repo):
        monitor.start()
        await monitor.drain()
        calls = stocked_repo.fetch_calls

        stocked_repo.notify(1)
        monitor.stop()
        await asyncio.sleep(DEBOUNCE * 5)

        assert stocked_repo.fetch_calls == calls

    async def test_in_flight_result_discarded_after_stop(self, monitor, stocked_repo, sink):
        gate, entered = gate_fetches(stocked_repo)
        monitor.start()
        await asyncio.sleep(0)

        monitor.stop()
        gate.set()
        await monitor.drain()

        assert entered == [1]
        assert sink.batches == []
        assert monitor.current_alerts == []
        assert monitor.cycle_count == 0

    async def test_stop_during_emit_skips_remaining_sinks(self, stocked_repo):
        calls: list[str] = []
        monitor = MonitoringLoop(stocked_repo, interval_seconds=60, debounce_seconds=DEBOUNCE)

        async def stopping_sink(alerts):
            calls.append("first")
            monitor.stop()
            await asyncio.sleep(0)

        def later_sink(alerts):
            calls.append("second")

        monitor.add_sink(stopping_sink)
        monitor.add_sink(later_sink)
        monitor.start()
        await monitor.drain()

        assert calls == ["first"]
        assert not monitor.is_running

    async def test_stale_handle_does_not_stop_new_run(self, monitor):
        old = monitor.start()
        await monitor.drain()
        monitor.stop()

        new = monitor.start()
        old.cancel()

        assert new.generation == old.generation + 1
        assert monitor.is_running

    async def test_restart_keeps_retained_alerts(self, monitor, sink):
        monitor.start()
        await monitor.drain()
        monitor.stop()

        monitor.start()
        await monitor.drain()

        assert sink.batches == [[1, 2]]
