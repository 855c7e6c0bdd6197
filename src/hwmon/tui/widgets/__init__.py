"""Widget components for the hwmon TUI.

- MetricGauge: Bordered usage bar for one metric
- InfoPanel: Text summary of the latest snapshot
"""

from hwmon.tui.widgets.gauge import InfoPanel, MetricGauge, format_percent, info_lines

__all__ = [
    "InfoPanel",
    "MetricGauge",
    "format_percent",
    "info_lines",
]
