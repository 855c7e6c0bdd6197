"""Gauge and info widgets for the hwmon TUI.

This module provides:
- MetricGauge: A bordered horizontal bar showing one usage percentage
- InfoPanel: A text panel summarising the latest snapshot
- format_percent, info_lines: Pure formatting helpers shared by both
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from rich.text import Text
from textual.widgets import Static

from hwmon.models.base import MetricKind

if TYPE_CHECKING:
    from hwmon.config.loader import DisplayConfig
    from hwmon.models.base import Snapshot

UNAVAILABLE = "n/a"
QUIT_HINT = "Press 'q' or Ctrl+C to quit"

# Bar width used before the widget has been laid out
DEFAULT_BAR_WIDTH = 20


def format_percent(value: float, decimal_places: int = 1, available: bool = True) -> str:
    """Format a percentage like ``12.5%``, or ``n/a`` when unavailable."""
    if not available:
        return UNAVAILABLE
    return f"{value:.{decimal_places}f}%"


def _format_usage(percent: float, used_gb: float, total_gb: float, decimal_places: int, available: bool) -> str:
    if not available:
        return UNAVAILABLE
    d = decimal_places
    return f"{percent:.{d}f}% ({used_gb:.{d}f} GB / {total_gb:.{d}f} GB)"


def info_lines(snapshot: Snapshot, display: DisplayConfig) -> list[str]:
    """Build the info panel rows for ``snapshot``.

    Args:
        snapshot: The snapshot to describe
        display: Decimal places and time format to use

    Returns:
        One string per row, blank rows included
    """
    d = display.decimal_places
    local_time = snapshot.timestamp.astimezone()
    return [
        f"Time: {local_time.strftime(display.time_format)}",
        "",
        f"CPU: {format_percent(snapshot.cpu_percent, d, snapshot.is_available(MetricKind.CPU))}",
        "",
        "Memory: "
        + _format_usage(
            snapshot.memory_percent,
            snapshot.memory_used_gb,
            snapshot.memory_total_gb,
            d,
            snapshot.is_available(MetricKind.MEMORY),
        ),
        "",
        f"Disk ({snapshot.disk_drive}): "
        + _format_usage(
            snapshot.disk_percent,
            snapshot.disk_used_gb,
            snapshot.disk_total_gb,
            d,
            snapshot.is_available(MetricKind.DISK),
        ),
        "",
        QUIT_HINT,
    ]


class MetricGauge(Static):
    """Horizontal usage bar with a percentage label.

    Attributes:
        percent: The last value shown (0.0 when unavailable)
        available: Whether the last value was sampled successfully
    """

    DEFAULT_CSS: ClassVar[str] = """
    MetricGauge {
        border: round white;
        border-title-color: cyan;
        height: 3;
        width: 1fr;
        padding: 0 1;
    }
    """

    def __init__(self, title: str, bar_color: str = "green", *, id: str | None = None) -> None:
        super().__init__("", id=id)
        self.border_title = title
        self.bar_color = bar_color
        self.percent = 0.0
        self.available = False
        self.label = UNAVAILABLE

    def show(self, percent: float, *, available: bool = True, decimal_places: int = 1) -> None:
        """Display ``percent`` (0-100), or the unavailable state."""
        self.percent = percent if available else 0.0
        self.available = available
        self.label = format_percent(percent, decimal_places, available)
        self.update(self._render_bar())

    def _render_bar(self) -> Text:
        label = f" {self.label}"
        width = self.content_size.width or DEFAULT_BAR_WIDTH
        bar_width = max(width - len(label), 1)
        filled = round(bar_width * min(max(self.percent, 0.0), 100.0) / 100.0)

        text = Text()
        text.append("█" * filled, style=self.bar_color)
        text.append("░" * (bar_width - filled), style="grey37")
        text.append(label, style="bold" if self.available else "dim")
        return text

    def on_resize(self) -> None:
        self.update(self._render_bar())


class InfoPanel(Static):
    """System information panel listing the latest readings."""

    DEFAULT_CSS: ClassVar[str] = """
    InfoPanel {
        border: round white;
        border-title-color: cyan;
        height: 1fr;
        padding: 0 1;
    }
    """

    def __init__(self, *, id: str | None = None) -> None:
        super().__init__(f"Waiting for data...\n\n{QUIT_HINT}", id=id)
        self.border_title = "System Information"
        self.lines: list[str] = []

    def show(self, snapshot: Snapshot, display: DisplayConfig) -> None:
        self.lines = info_lines(snapshot, display)
        self.update("\n".join(self.lines))
