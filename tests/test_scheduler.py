"""Tests for the refresh timer and the Scheduler dispatch loop."""

import asyncio
import logging
import time

import pytest

from hwmon.collectors import (
    EventSource,
    PeriodicTimer,
    QueueEventSource,
    Quit,
    Resize,
    ScheduleEvent,
    Scheduler,
    SchedulerState,
)
from hwmon.config import Config
from hwmon.errors import InitializationError, ProviderError
from hwmon.models import MetricKind, Snapshot
from hwmon.presenter import Presenter
from hwmon.providers import StaticProvider

# Test fixtures and mock implementations


class RecordingPresenter(Presenter):
    """Presenter that records every call."""

    def __init__(self, fail_init: bool = False, fail_render: bool = False) -> None:
        self.fail_init = fail_init
        self.fail_render = fail_render
        self.initialized = False
        self.closed = False
        self.rendered: list[Snapshot] = []
        self.resizes: list[tuple[int, int]] = []

    def initialize(self) -> None:
        if self.fail_init:
            raise RuntimeError("no terminal")
        self.initialized = True

    def render(self, snapshot: Snapshot) -> None:
        if self.fail_render:
            raise RuntimeError("render broke")
        self.rendered.append(snapshot)

    def on_resize(self, width: int, height: int) -> None:
        self.resizes.append((width, height))

    def close(self) -> None:
        self.closed = True


class BrokenEventSource(EventSource):
    """Event source that cannot be opened."""

    def __init__(self) -> None:
        self.closed = False

    async def open(self) -> None:
        raise OSError("tty unavailable")

    async def next_event(self) -> ScheduleEvent:
        raise AssertionError("never opened")

    def close(self) -> None:
        self.closed = True


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _config(interval: float = 0.1) -> Config:
    return Config(refresh_interval=interval, sample_duration=0.0, disk_drive="/")


def _scheduler(
    provider: StaticProvider | None = None,
    presenter: RecordingPresenter | None = None,
    events: EventSource | None = None,
    interval: float = 0.1,
) -> tuple[Scheduler, RecordingPresenter, EventSource]:
    presenter = presenter or RecordingPresenter()
    events = events or QueueEventSource()
    scheduler = Scheduler(_config(interval), provider or StaticProvider(cpu=10.0), presenter, events)
    return scheduler, presenter, events


# ============================================================================
# PeriodicTimer Tests
# ============================================================================


class TestPeriodicTimer:
    """Tests for the fixed-cadence timer."""

    def test_interval_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            PeriodicTimer(0)

    def test_deadlines_follow_cadence(self) -> None:
        clock = FakeClock()
        timer = PeriodicTimer(1.0, clock=clock)
        timer.reset()
        assert timer.next_deadline() == 1.0

    @pytest.mark.asyncio
    async def test_missed_deadlines_are_skipped(self) -> None:
        clock = FakeClock()
        timer = PeriodicTimer(1.0, clock=clock)
        timer.reset()

        clock.now = 3.5
        start = time.perf_counter()
        await timer.wait()
        assert time.perf_counter() - start < 0.1
        assert timer.skipped == 2
        assert timer.next_deadline() == 4.0

    @pytest.mark.asyncio
    async def test_on_time_wait_sleeps_until_deadline(self) -> None:
        timer = PeriodicTimer(0.05)
        timer.reset()
        start = time.perf_counter()
        await timer.wait()
        assert time.perf_counter() - start >= 0.04
        assert timer.skipped == 0


# ============================================================================
# Lifecycle Tests
# ============================================================================


class TestSchedulerLifecycle:
    """Tests for state transitions and initialization failures."""

    @pytest.mark.asyncio
    async def test_start_moves_to_running(self) -> None:
        scheduler, presenter, _ = _scheduler()
        assert scheduler.state is SchedulerState.IDLE

        await scheduler.start()
        assert scheduler.state is SchedulerState.RUNNING
        assert presenter.initialized

        await scheduler.stop()
        assert scheduler.state is SchedulerState.STOPPED
        assert presenter.closed

    @pytest.mark.asyncio
    async def test_start_twice_raises(self) -> None:
        scheduler, _, _ = _scheduler()
        await scheduler.start()
        try:
            with pytest.raises(RuntimeError, match="running"):
                await scheduler.start()
        finally:
            await scheduler.stop()

    @pytest.mark.asyncio
    async def test_presenter_failure_is_initialization_error(self) -> None:
        events = QueueEventSource()
        scheduler, _, _ = _scheduler(presenter=RecordingPresenter(fail_init=True), events=events)

        with pytest.raises(InitializationError, match="no terminal") as exc_info:
            await scheduler.run()

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert scheduler.state is SchedulerState.IDLE
        assert events.closed
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_event_source_failure_is_initialization_error(self) -> None:
        events = BrokenEventSource()
        scheduler, presenter, _ = _scheduler(events=events)

        with pytest.raises(InitializationError, match="tty unavailable"):
            await scheduler.start()

        assert events.closed
        assert not presenter.initialized
        assert scheduler.state is SchedulerState.IDLE
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_from_idle(self) -> None:
        scheduler, presenter, events = _scheduler()
        await scheduler.stop()

        assert scheduler.state is SchedulerState.STOPPED
        assert not presenter.closed  # never initialized
        with pytest.raises(RuntimeError, match="stopped"):
            await scheduler.run()

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self) -> None:
        scheduler, _, _ = _scheduler()
        await scheduler.start()
        await scheduler.stop()
        await scheduler.stop()
        assert scheduler.state is SchedulerState.STOPPED


# ============================================================================
# Dispatch loop Tests
# ============================================================================


class TestSchedulerLoop:
    """Tests for rounds, ticks, and external events."""

    @pytest.mark.asyncio
    async def test_initial_round_then_quit(self) -> None:
        events = QueueEventSource()
        scheduler, presenter, _ = _scheduler(events=events, interval=10.0)
        events.post(Quit())

        await asyncio.wait_for(scheduler.run(), timeout=2.0)

        assert scheduler.rounds_completed == 1
        assert len(presenter.rendered) == 1
        assert presenter.rendered[0] is scheduler.last_snapshot
        assert scheduler.state is SchedulerState.STOPPED
        assert presenter.closed
        assert events.closed

    @pytest.mark.asyncio
    async def test_ticks_drive_rounds(self) -> None:
        scheduler, presenter, _ = _scheduler(interval=0.1)
        task = asyncio.create_task(scheduler.run())

        await asyncio.sleep(0.35)
        await scheduler.stop()
        await asyncio.wait_for(task, timeout=1.0)

        # Initial round plus roughly one per 0.1s tick
        assert 3 <= scheduler.rounds_completed <= 5
        assert len(presenter.rendered) == scheduler.rounds_completed

    @pytest.mark.asyncio
    async def test_quit_wins_over_ready_tick(self) -> None:
        """A Quit that arrives during a slow round exits before the overdue tick."""
        provider = StaticProvider(cpu=10.0, delays={"cpu_percent": 0.25})
        events = QueueEventSource()
        scheduler, _, _ = _scheduler(provider=provider, events=events, interval=0.1)

        loop = asyncio.get_running_loop()
        loop.call_later(0.05, events.post, Quit())
        await asyncio.wait_for(scheduler.run(), timeout=2.0)

        assert scheduler.rounds_completed == 1

    @pytest.mark.asyncio
    async def test_resize_rerenders_last_snapshot(self) -> None:
        events = QueueEventSource()
        scheduler, presenter, _ = _scheduler(events=events, interval=10.0)
        task = asyncio.create_task(scheduler.run())

        while scheduler.rounds_completed < 1:
            await asyncio.sleep(0.01)
        first = scheduler.last_snapshot

        events.post(Resize(100, 30))
        while not presenter.resizes:
            await asyncio.sleep(0.01)
        await asyncio.sleep(0.01)

        assert presenter.resizes == [(100, 30)]
        assert scheduler.rounds_completed == 1
        assert scheduler.last_snapshot is first
        assert presenter.rendered == [first, first]

        events.post(Quit())
        await asyncio.wait_for(task, timeout=1.0)

    @pytest.mark.asyncio
    async def test_resize_before_first_round_collects(self) -> None:
        scheduler, presenter, _ = _scheduler(interval=10.0)
        await scheduler.start()
        try:
            await scheduler._dispatch(Resize(40, 10))
            assert scheduler.rounds_completed == 1
            assert presenter.resizes == [(40, 10)]
            assert presenter.rendered == [scheduler.last_snapshot]
        finally:
            await scheduler.stop()

    @pytest.mark.asyncio
    async def test_provider_failures_do_not_stop_the_loop(self, caplog: pytest.LogCaptureFixture) -> None:
        provider = StaticProvider(cpu=ProviderError("failed to get CPU usage"))
        scheduler, presenter, _ = _scheduler(provider=provider, interval=0.1)
        task = asyncio.create_task(scheduler.run())

        with caplog.at_level(logging.ERROR, logger="hwmon"):
            await asyncio.sleep(0.25)
            await scheduler.stop()
            await asyncio.wait_for(task, timeout=1.0)

        assert scheduler.rounds_completed >= 2
        assert all(not s.is_available(MetricKind.CPU) for s in presenter.rendered)
        assert all(s.is_available(MetricKind.MEMORY) for s in presenter.rendered)

    @pytest.mark.asyncio
    async def test_render_failure_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        events = QueueEventSource()
        scheduler, _, _ = _scheduler(presenter=RecordingPresenter(fail_render=True), events=events, interval=10.0)
        events.post(Quit())

        with caplog.at_level(logging.ERROR, logger="hwmon"):
            await asyncio.wait_for(scheduler.run(), timeout=2.0)

        assert scheduler.rounds_completed == 1
        assert any("failed to render" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_run_round_after_stop_raises(self) -> None:
        scheduler, _, _ = _scheduler()
        await scheduler.stop()
        with pytest.raises(RuntimeError):
            await scheduler.run_round()
