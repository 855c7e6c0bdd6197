"""Abstract metric provider interface.

A MetricProvider answers the three blocking queries a collection round
needs. Implementations raise on failure (ideally ProviderError); the
Collector runs each call in a worker thread and turns whatever happens
into a MetricSample.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from hwmon.models.base import DiskInfo, MemoryInfo


class MetricProvider(ABC):
    """Source of CPU, memory and disk readings.

    Subclasses must implement all three queries. Each may block: CPU
    sampling blocks for ``sample_duration`` seconds by definition.

    Class Attributes:
        name: Short identifier used in logs
    """

    name: str = "provider"

    @abstractmethod
    def cpu_percent(self, sample_duration: float) -> float | Sequence[float] | None:
        """Measure overall CPU utilization over ``sample_duration`` seconds.

        Returns:
            A percentage in 0-100, or a sequence whose first element is
            the overall percentage
        """
        pass

    @abstractmethod
    def memory_info(self) -> MemoryInfo:
        """Return the current virtual memory usage."""
        pass

    @abstractmethod
    def disk_info(self, path: str) -> DiskInfo:
        """Return usage for the volume containing ``path``."""
        pass
