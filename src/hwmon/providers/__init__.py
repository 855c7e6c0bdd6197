"""Metric providers for hwmon.

- MetricProvider: Abstract interface for the three blocking queries
- PsutilProvider: Live readings from the OS via psutil
- StaticProvider: Fixed readings for tests and demos
"""

from hwmon.providers.base import MetricProvider
from hwmon.providers.psutil_provider import PsutilProvider
from hwmon.providers.static import StaticProvider

__all__ = [
    "MetricProvider",
    "PsutilProvider",
    "StaticProvider",
]
