"""hwmon - a small concurrent hardware monitor.

Samples CPU, memory and disk usage on a fixed cadence, merges the readings
into one immutable snapshot per round and hands it to a presenter (a Textual
TUI or a headless formatter).
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
