"""psutil-backed metric provider.

Wraps the psutil calls hwmon needs and re-raises their failures as
ProviderError carrying a short description of what failed.
"""

import logging

import psutil

from hwmon.errors import ProviderError
from hwmon.models.base import DiskInfo, MemoryInfo, MetricKind
from hwmon.providers.base import MetricProvider

logger = logging.getLogger(__name__)


class PsutilProvider(MetricProvider):
    """Reads live metrics from the operating system via psutil."""

    name = "psutil"

    def cpu_percent(self, sample_duration: float) -> float:
        """Measure overall CPU usage, blocking for ``sample_duration`` seconds.

        A zero duration compares against the previous call, which psutil
        reports as 0.0 the first time.

        Raises:
            ProviderError: If psutil cannot read CPU times
        """
        try:
            return psutil.cpu_percent(interval=sample_duration or None, percpu=False)
        except (OSError, psutil.Error) as e:
            raise ProviderError(f"failed to get CPU usage: {e}", MetricKind.CPU) from e

    def memory_info(self) -> MemoryInfo:
        """Read virtual memory usage.

        Raises:
            ProviderError: If psutil cannot read memory statistics
        """
        try:
            vm = psutil.virtual_memory()
        except (OSError, psutil.Error) as e:
            raise ProviderError(f"failed to get memory usage: {e}", MetricKind.MEMORY) from e

        return MemoryInfo(
            used_percent=vm.percent,
            used_bytes=vm.used,
            total_bytes=vm.total,
        )

    def disk_info(self, path: str) -> DiskInfo:
        """Read usage for the volume mounted at ``path``.

        Raises:
            ProviderError: If the path does not exist or cannot be read
        """
        try:
            usage = psutil.disk_usage(path)
        except (OSError, psutil.Error) as e:
            raise ProviderError(f"failed to get disk usage for {path}: {e}", MetricKind.DISK) from e

        logger.debug("disk_usage(%s): %.1f%% of %d bytes", path, usage.percent, usage.total)
        return DiskInfo(
            used_percent=usage.percent,
            used_bytes=usage.used,
            total_bytes=usage.total,
        )
