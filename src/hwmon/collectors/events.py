"""External control events for the dispatch loop.

ScheduleEvent is a small tagged union: Tick drives a round, Resize reports
a new terminal size, and Quit ends the loop. EventSource is the abstract
producer of Resize and Quit; QueueEventSource is the asyncio-queue backed
implementation used by the TUI and the stream runner.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
from dataclasses import dataclass
import logging
import signal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tick:
    """The refresh cadence elapsed."""


@dataclass(frozen=True)
class Resize:
    """The display area changed size."""

    width: int
    height: int


@dataclass(frozen=True)
class Quit:
    """The operator asked to stop."""


ScheduleEvent = Tick | Resize | Quit


class EventSource(ABC):
    """Producer of external control events."""

    async def open(self) -> None:
        """Prepare the source; called once before the loop starts."""
        return None

    @abstractmethod
    async def next_event(self) -> ScheduleEvent:
        """Wait for and return the next event."""
        pass

    def close(self) -> None:
        """Release resources; called once when the loop stops."""
        return None


class QueueEventSource(EventSource):
    """Event source fed by ``post`` calls.

    Args:
        handle_signals: Map ``quit_signals`` to Quit while open
        quit_signals: Signals treated as a quit request
    """

    def __init__(
        self,
        *,
        handle_signals: bool = False,
        quit_signals: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM),
    ) -> None:
        self._queue: asyncio.Queue[ScheduleEvent] = asyncio.Queue()
        self._handle_signals = handle_signals
        self.quit_signals = quit_signals
        self._loop: asyncio.AbstractEventLoop | None = None
        self._installed_signals: list[signal.Signals] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def installed_signals(self) -> tuple[signal.Signals, ...]:
        """Signals currently mapped to Quit."""
        return tuple(self._installed_signals)

    async def open(self) -> None:
        self._loop = asyncio.get_running_loop()
        if not self._handle_signals:
            return
        for sig in self.quit_signals:
            try:
                self._loop.add_signal_handler(sig, self.post, Quit())
            except (NotImplementedError, RuntimeError, ValueError) as e:
                logger.debug("Signal handler for %s not installed: %s", sig.name, e)
            else:
                self._installed_signals.append(sig)

    def post(self, event: ScheduleEvent) -> None:
        """Queue an event from the event loop thread.

        Events posted after ``close`` are dropped.
        """
        if self._closed:
            logger.debug("Dropping %s posted after close", type(event).__name__)
            return
        self._queue.put_nowait(event)

    def post_threadsafe(self, event: ScheduleEvent) -> None:
        """Queue an event from any thread.

        Raises:
            RuntimeError: If the source has not been opened
        """
        if self._loop is None:
            raise RuntimeError("Event source is not open")
        self._loop.call_soon_threadsafe(self.post, event)

    async def next_event(self) -> ScheduleEvent:
        if self._closed:
            raise RuntimeError("Event source is closed")
        return await self._queue.get()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._loop is not None:
            for sig in self._installed_signals:
                self._loop.remove_signal_handler(sig)
        self._installed_signals.clear()
