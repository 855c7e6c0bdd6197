"""Fixed-value metric provider.

StaticProvider returns preset readings, optionally after a delay, and can
be told to raise instead. It is used for tests and demos where the real
system should not be sampled.
"""

from collections import Counter
from collections.abc import Sequence
import threading
import time
from typing import Any

from hwmon.models.base import DiskInfo, MemoryInfo
from hwmon.providers.base import MetricProvider

DEFAULT_MEMORY = MemoryInfo(used_percent=50.0, used_bytes=8 * 1024**3, total_bytes=16 * 1024**3)
DEFAULT_DISK = DiskInfo(used_percent=25.0, used_bytes=128 * 1024**3, total_bytes=512 * 1024**3)


class StaticProvider(MetricProvider):
    """Provider returning fixed values.

    Any value may be an exception instance, which is raised instead of
    returned. Delays are per method and in seconds.

    Attributes:
        cpu: Value returned by cpu_percent()
        memory: Value returned by memory_info()
        disk: Value returned by disk_info()
        delays: Seconds to block before answering, keyed by method name
        calls: Number of calls made, keyed by method name
        disk_paths: Paths passed to disk_info(), in call order
    """

    name = "static"

    def __init__(
        self,
        cpu: float | Sequence[float] | BaseException | None = 0.0,
        memory: MemoryInfo | BaseException | None = DEFAULT_MEMORY,
        disk: DiskInfo | BaseException | None = DEFAULT_DISK,
        *,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.cpu = cpu
        self.memory = memory
        self.disk = disk
        self.delays = dict(delays or {})
        self.calls: Counter[str] = Counter()
        self.disk_paths: list[str] = []
        self._lock = threading.Lock()

    def _answer(self, method: str, value: Any) -> Any:
        with self._lock:
            self.calls[method] += 1
        delay = self.delays.get(method, 0.0)
        if delay > 0:
            time.sleep(delay)
        if isinstance(value, BaseException):
            raise value
        return value

    def cpu_percent(self, sample_duration: float) -> Any:
        return self._answer("cpu_percent", self.cpu)

    def memory_info(self) -> Any:
        return self._answer("memory_info", self.memory)

    def disk_info(self, path: str) -> Any:
        with self._lock:
            self.disk_paths.append(path)
        return self._answer("disk_info", self.disk)
