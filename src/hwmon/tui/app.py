"""Main TUI application for hwmon.

This module provides:
- HwmonApp: The Textual application hosting the scheduler
- TextualPresenter: Presenter that draws snapshots into the app's widgets
- run_app: Entry point used by the CLI

The scheduler runs as a Textual worker on the app's own event loop. The quit
keys and SIGTERM are forwarded to it as Quit, terminal resizes as Resize.
When the scheduler stops, the app exits.
"""

from __future__ import annotations

import logging
import signal
from typing import TYPE_CHECKING

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Header

from hwmon import __version__
from hwmon.collectors.events import QueueEventSource, Quit, Resize
from hwmon.collectors.scheduler import Scheduler, SchedulerState
from hwmon.errors import InitializationError
from hwmon.models.base import MetricKind
from hwmon.presenter import Presenter
from hwmon.providers.psutil_provider import PsutilProvider
from hwmon.tui.widgets.gauge import InfoPanel, MetricGauge

if TYPE_CHECKING:
    from hwmon.config.loader import Config
    from hwmon.models.base import Snapshot
    from hwmon.providers.base import MetricProvider

logger = logging.getLogger(__name__)

# Below this terminal width the gauges stack vertically
COMPACT_WIDTH = 60

GAUGE_IDS: dict[MetricKind, str] = {
    MetricKind.CPU: "cpu-gauge",
    MetricKind.MEMORY: "memory-gauge",
    MetricKind.DISK: "disk-gauge",
}


class TextualPresenter(Presenter):
    """Presenter that updates the gauges and info panel of an HwmonApp."""

    def __init__(self, app: HwmonApp) -> None:
        self.app = app
        self.compact = False
        self._gauges: dict[MetricKind, MetricGauge] = {}
        self._info: InfoPanel | None = None

    def initialize(self) -> None:
        """Look up the widgets; fails if the app has not been composed."""
        self._gauges = {
            kind: self.app.query_one(f"#{gauge_id}", MetricGauge) for kind, gauge_id in GAUGE_IDS.items()
        }
        self._info = self.app.query_one("#info", InfoPanel)

    def render(self, snapshot: Snapshot) -> None:
        if self._info is None:
            raise RuntimeError("Presenter is not initialized")

        decimal_places = self.app.config.display.decimal_places
        values = {
            MetricKind.CPU: snapshot.cpu_percent,
            MetricKind.MEMORY: snapshot.memory_percent,
            MetricKind.DISK: snapshot.disk_percent,
        }
        for kind, gauge in self._gauges.items():
            gauge.show(values[kind], available=snapshot.is_available(kind), decimal_places=decimal_places)
        self._info.show(snapshot, self.app.config.display)

    def on_resize(self, width: int, height: int) -> None:
        self.compact = width < COMPACT_WIDTH
        self.app.query_one("#gauges", Horizontal).set_class(self.compact, "compact")

    def close(self) -> None:
        self._gauges = {}
        self._info = None


class HwmonApp(App[None]):
    """hwmon terminal UI.

    Attributes:
        config: The loaded configuration
        scheduler: The scheduler driving collection rounds
        presenter: The presenter the scheduler renders into
    """

    TITLE = "hwmon"
    SUB_TITLE = f"v{__version__}"

    CSS = """
    Screen {
        layout: vertical;
    }

    #gauges {
        height: 3;
        width: 100%;
    }

    #gauges.compact {
        layout: vertical;
        height: 9;
    }

    #gauges.compact MetricGauge {
        width: 100%;
    }

    #info {
        height: 1fr;
        width: 100%;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(self, config: Config, provider: MetricProvider | None = None) -> None:
        """Initialize the hwmon application.

        Args:
            config: Loaded configuration
            provider: Metric source; reads the live system when omitted
        """
        super().__init__()
        self.config = config
        # Ctrl+C arrives as a key press in raw mode; SIGTERM still needs mapping
        self.event_source = QueueEventSource(handle_signals=True, quit_signals=(signal.SIGTERM,))
        self.presenter = TextualPresenter(self)
        self.scheduler = Scheduler(
            config,
            provider if provider is not None else PsutilProvider(),
            self.presenter,
            self.event_source,
        )

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="gauges"):
            yield MetricGauge("CPU Usage", "yellow", id=GAUGE_IDS[MetricKind.CPU])
            yield MetricGauge("Memory Usage", "green", id=GAUGE_IDS[MetricKind.MEMORY])
            yield MetricGauge("Disk Usage", "red", id=GAUGE_IDS[MetricKind.DISK])
        yield InfoPanel(id="info")
        yield Footer()

    def on_mount(self) -> None:
        logger.info("hwmon v%s TUI started (interval=%.2fs)", __version__, self.config.refresh_interval)
        self.run_worker(self._run_scheduler(), name="scheduler", exclusive=True)

    async def _run_scheduler(self) -> None:
        try:
            await self.scheduler.run()
        except InitializationError as e:
            logger.error("TUI failed to start: %s", e)
            self.exit(return_code=1, message=str(e))
            return
        self.exit()

    def on_resize(self, event: events.Resize) -> None:
        self.event_source.post(Resize(event.size.width, event.size.height))

    async def action_quit(self) -> None:
        """Ask the scheduler to stop; the app exits once it has."""
        if self.scheduler.state is SchedulerState.RUNNING:
            self.event_source.post(Quit())
        else:
            self.exit()


def run_app(config: Config, provider: MetricProvider | None = None) -> int:
    """Create and run the hwmon TUI.

    Args:
        config: Loaded configuration
        provider: Metric source; reads the live system when omitted

    Returns:
        Process exit code
    """
    app = HwmonApp(config, provider)
    app.run()
    return app.return_code or 0
