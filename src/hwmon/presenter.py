"""Presenter interface and the stream presenter.

A Presenter receives every Snapshot the scheduler produces. The TUI has its
own implementation in ``hwmon.tui.app``; FormatterPresenter writes formatted
snapshots to a text stream for headless use.
"""

from abc import ABC, abstractmethod
import logging
import sys
from typing import Protocol, TextIO

from hwmon.models.base import Snapshot

logger = logging.getLogger(__name__)


class SnapshotFormatter(Protocol):
    """Anything that turns a Snapshot into text."""

    def format(self, snapshot: Snapshot) -> str: ...


class Presenter(ABC):
    """Displays snapshots to the operator.

    All methods are called from the scheduler's event loop. ``initialize``
    runs once before the first render; any exception it raises aborts
    startup as an InitializationError.
    """

    def initialize(self) -> None:
        """Prepare the display."""
        return None

    @abstractmethod
    def render(self, snapshot: Snapshot) -> None:
        """Show ``snapshot``, replacing whatever was shown before."""
        pass

    def on_resize(self, width: int, height: int) -> None:
        """Adapt to a new display size; the scheduler re-renders afterwards."""
        return None

    def close(self) -> None:
        """Release the display."""
        return None


class FormatterPresenter(Presenter):
    """Writes one formatted snapshot per render to a text stream.

    Args:
        formatter: Object with a ``format(snapshot) -> str`` method
        stream: Destination stream (stdout by default)
    """

    def __init__(self, formatter: SnapshotFormatter, stream: TextIO | None = None) -> None:
        self.formatter = formatter
        self.stream = stream if stream is not None else sys.stdout
        self.rendered = 0

    def render(self, snapshot: Snapshot) -> None:
        output = self.formatter.format(snapshot)
        self.stream.write(output)
        if not output.endswith("\n"):
            self.stream.write("\n")
        self.stream.flush()
        self.rendered += 1
