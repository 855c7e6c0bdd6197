"""Terminal UI for hwmon, built on Textual."""

from hwmon.tui.app import HwmonApp, TextualPresenter, run_app

__all__ = [
    "HwmonApp",
    "TextualPresenter",
    "run_app",
]
