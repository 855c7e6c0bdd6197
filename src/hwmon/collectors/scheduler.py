"""Refresh scheduling and event dispatch.

The Scheduler owns the single dispatch loop of hwmon. It runs one
collection round per timer tick, feeds every Snapshot to the presenter,
and stays responsive to Resize and Quit events between rounds.

Key features:
- Fixed monotonic cadence; ticks missed during a slow round are skipped
- Rounds run inline in the loop, so at most one is in flight
- External events take precedence over a tick that is ready at the same time
- Resize re-renders the last snapshot instead of discarding it
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from enum import Enum
import logging
import math
import time
from typing import TYPE_CHECKING, Any

from hwmon.collectors.aggregator import Aggregator
from hwmon.collectors.collector import Collector
from hwmon.collectors.events import EventSource, Quit, Resize, ScheduleEvent, Tick
from hwmon.errors import InitializationError
from hwmon.sentry import add_breadcrumb

if TYPE_CHECKING:
    from hwmon.config.loader import Config
    from hwmon.models.base import Snapshot
    from hwmon.presenter import Presenter
    from hwmon.providers.base import MetricProvider

logger = logging.getLogger(__name__)


class PeriodicTimer:
    """Fires on a fixed cadence of ``start + n * interval``.

    If a caller is late, the deadline it missed fires immediately and any
    further missed deadlines are dropped, so a slow consumer gets at most one
    catch-up tick rather than a burst.

    Attributes:
        interval: Seconds between deadlines
        skipped: Total number of deadlines dropped so far
    """

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic) -> None:
        if interval <= 0:
            raise ValueError("Interval must be positive")
        self.interval = interval
        self.skipped = 0
        self._clock = clock
        self._start: float | None = None
        self._ticks = 0

    def reset(self) -> None:
        """Restart the cadence from now."""
        self._start = self._clock()
        self._ticks = 0

    def next_deadline(self) -> float:
        """Return the clock time of the next deadline."""
        if self._start is None:
            self.reset()
        assert self._start is not None
        return self._start + (self._ticks + 1) * self.interval

    async def wait(self) -> None:
        """Sleep until the next deadline."""
        deadline = self.next_deadline()
        assert self._start is not None
        now = self._clock()
        self._ticks += 1

        if now >= deadline:
            elapsed_ticks = math.floor((now - self._start) / self.interval)
            if elapsed_ticks > self._ticks:
                missed = elapsed_ticks - self._ticks
                self.skipped += missed
                logger.debug("Skipping %d missed tick(s)", missed)
                self._ticks = elapsed_ticks
            return

        await asyncio.sleep(deadline - now)


class SchedulerState(str, Enum):
    """Lifecycle states of the Scheduler."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Scheduler:
    """Drives collection rounds and dispatches control events.

    Args:
        config: Loaded configuration (refresh interval, sampling settings)
        provider: Source of metric readings
        presenter: Receives every snapshot
        events: Source of Resize and Quit events
        collector: Override the Collector built from ``config``
        aggregator: Override the Aggregator built from ``config``
    """

    def __init__(
        self,
        config: Config,
        provider: MetricProvider,
        presenter: Presenter,
        events: EventSource,
        *,
        collector: Collector | None = None,
        aggregator: Aggregator | None = None,
    ) -> None:
        self.config = config
        self.presenter = presenter
        self.events = events
        self._owns_collector = collector is None
        self._collector = collector if collector is not None else Collector.from_config(provider, config)
        self._aggregator = aggregator if aggregator is not None else Aggregator(config.disk_drive)
        self._timer = PeriodicTimer(config.refresh_interval)
        self._state = SchedulerState.IDLE
        self._presenter_ready = False
        self._last_snapshot: Snapshot | None = None
        self._rounds_completed = 0
        self._stop_requested = asyncio.Event()
        self._stopped = asyncio.Event()
        self._loop_task: asyncio.Task[Any] | None = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def last_snapshot(self) -> Snapshot | None:
        """The most recent snapshot, kept across rounds and resizes."""
        return self._last_snapshot

    @property
    def rounds_completed(self) -> int:
        return self._rounds_completed

    async def start(self) -> None:
        """Open the event source, initialize the presenter, and arm the timer.

        Raises:
            RuntimeError: If the scheduler is not idle
            InitializationError: If the event source or presenter fails to
                initialize; the scheduler stays idle
        """
        if self._state is not SchedulerState.IDLE:
            raise RuntimeError(f"Cannot start scheduler in state '{self._state.value}'")

        try:
            await self.events.open()
            self.presenter.initialize()
        except Exception as e:
            self.events.close()
            logger.error("Initialization failed: %s", e)
            raise InitializationError(f"Initialization failed: {e}") from e

        self._presenter_ready = True
        self._timer.reset()
        self._state = SchedulerState.RUNNING
        logger.info(
            "Scheduler started (interval=%.2fs, disk=%s)",
            self.config.refresh_interval,
            self.config.disk_drive,
        )
        add_breadcrumb(
            "Scheduler started",
            category="scheduler",
            data={"refresh_interval": self.config.refresh_interval},
        )

    async def run(self) -> None:
        """Run the dispatch loop until Quit or ``stop``.

        Starts the scheduler if it is idle and runs an initial round so data
        is shown immediately. Always leaves the scheduler STOPPED.

        Raises:
            RuntimeError: If the scheduler is stopped or already running
            InitializationError: If startup fails
        """
        if self._state is SchedulerState.IDLE:
            await self.start()
        elif self._state is SchedulerState.STOPPED:
            raise RuntimeError("Scheduler is stopped")
        if self._loop_task is not None:
            raise RuntimeError("Scheduler loop is already running")

        self._loop_task = asyncio.current_task()
        tasks: dict[str, asyncio.Task[Any]] = {}
        try:
            if self._stop_requested.is_set():
                return
            await self.run_round()

            tasks["tick"] = asyncio.create_task(self._timer.wait(), name="hwmon-tick")
            tasks["event"] = asyncio.create_task(self.events.next_event(), name="hwmon-event")
            tasks["stop"] = asyncio.create_task(self._stop_requested.wait(), name="hwmon-stop")

            while True:
                done, _ = await asyncio.wait(set(tasks.values()), return_when=asyncio.FIRST_COMPLETED)

                if tasks["stop"] in done:
                    logger.info("Stop requested")
                    break

                # Events before ticks: a Quit ready alongside a tick wins
                if tasks["event"] in done:
                    try:
                        event = tasks["event"].result()
                    except Exception:
                        logger.exception("Event source failed; stopping")
                        break
                    if isinstance(event, Quit):
                        logger.info("Quit received")
                        break
                    await self._dispatch(event)
                    tasks["event"] = asyncio.create_task(self.events.next_event(), name="hwmon-event")

                if tasks["tick"] in done:
                    await self.run_round()
                    tasks["tick"] = asyncio.create_task(self._timer.wait(), name="hwmon-tick")
        finally:
            for task in tasks.values():
                task.cancel()
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            self._loop_task = None
            self._shutdown()

    async def _dispatch(self, event: ScheduleEvent) -> None:
        if isinstance(event, Resize):
            logger.debug("Resize to %dx%d", event.width, event.height)
            self.presenter.on_resize(event.width, event.height)
            if self._last_snapshot is None:
                await self.run_round()
            else:
                self._render(self._last_snapshot)
        elif isinstance(event, Tick):
            await self.run_round()

    async def run_round(self) -> Snapshot:
        """Collect, aggregate, and render one snapshot.

        Provider failures are absorbed into the snapshot; this only raises if
        the scheduler is already stopped.

        Returns:
            The new snapshot, also stored as ``last_snapshot``
        """
        if self._state is SchedulerState.STOPPED:
            raise RuntimeError("Scheduler is stopped")

        snapshot = await self._aggregator.aggregate(self._collector.collect())
        self._last_snapshot = snapshot
        self._rounds_completed += 1
        if snapshot.unavailable:
            logger.debug(
                "Round %d unavailable: %s",
                self._rounds_completed,
                ", ".join(sorted(kind.value for kind in snapshot.unavailable)),
            )
        self._render(snapshot)
        return snapshot

    def _render(self, snapshot: Snapshot) -> None:
        try:
            self.presenter.render(snapshot)
        except Exception:
            logger.exception("Presenter failed to render snapshot")

    async def stop(self) -> None:
        """Stop the scheduler.

        Signals a running loop to shut down and waits for it, unless called
        from the loop itself. Otherwise shuts down directly. Idempotent.
        """
        if self._state is SchedulerState.STOPPED:
            return
        if self._loop_task is None:
            self._shutdown()
            return

        self._stop_requested.set()
        if asyncio.current_task() is not self._loop_task:
            await self._stopped.wait()

    def _shutdown(self) -> None:
        if self._state is SchedulerState.STOPPED:
            return
        self._stop_requested.set()
        self.events.close()
        if self._presenter_ready:
            self._presenter_ready = False
            try:
                self.presenter.close()
            except Exception:
                logger.exception("Presenter failed to close")
        if self._owns_collector:
            self._collector.close()
        self._state = SchedulerState.STOPPED
        self._stopped.set()
        logger.info("Scheduler stopped after %d round(s)", self._rounds_completed)
        add_breadcrumb(
            "Scheduler stopped",
            category="scheduler",
            data={"rounds_completed": self._rounds_completed},
        )
