"""Concurrent fan-out of one collection round.

The Collector issues the three provider queries at once, each in its own
worker thread, and yields one MetricSample per kind as results arrive.
Provider failures never cross the concurrency boundary as exceptions; they
are captured as ProviderError values inside the sample.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from concurrent.futures import ThreadPoolExecutor
import logging
import math
import time
from typing import TYPE_CHECKING, Any

from hwmon.collectors.base import MetricSample, SampleValue
from hwmon.errors import NoDataError, ProviderError
from hwmon.models.base import METRIC_COUNT, DiskInfo, MemoryInfo, MetricKind

if TYPE_CHECKING:
    from hwmon.config.loader import Config
    from hwmon.providers.base import MetricProvider

logger = logging.getLogger(__name__)


def _consume_result(future: asyncio.Future[Any]) -> None:
    """Retrieve an abandoned call's outcome so asyncio does not warn about it."""
    if not future.cancelled():
        future.exception()


def _cpu_reading(raw: Any) -> float:
    """Normalize a raw CPU reading to a single percentage.

    Raises:
        NoDataError: If the reading is missing, empty, or NaN
        ProviderError: If the reading has the wrong type or is out of range
    """
    if raw is None:
        raise NoDataError()
    if isinstance(raw, Sequence) and not isinstance(raw, str):
        if len(raw) == 0:
            raise NoDataError()
        raw = raw[0]
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ProviderError(f"unexpected CPU reading of type {type(raw).__name__}")

    value = float(raw)
    if math.isnan(value):
        raise NoDataError()
    if not 0.0 <= value <= 100.0:
        raise ProviderError(f"CPU usage out of range: {value}")
    return value


def _usage_reading(raw: Any, expected: type[MemoryInfo] | type[DiskInfo]) -> MemoryInfo | DiskInfo:
    """Check a memory or disk reading is present and non-degenerate.

    Raises:
        NoDataError: If the reading is missing, of the wrong type, or reports
            a zero total
    """
    if not isinstance(raw, expected) or raw.total_bytes == 0:
        raise NoDataError()
    return raw


class Collector:
    """Fans out the three metric queries of a round over a thread pool.

    Each call runs in its own worker thread. A call that exceeds ``timeout``
    is reported as failed and abandoned; its kind is skipped in later rounds
    until the thread returns, so a hung provider holds at most one worker.

    Attributes:
        provider: The MetricProvider being queried
        sample_duration: Seconds passed to ``cpu_percent``
        disk_path: Volume passed to ``disk_info``
        timeout: Per-call timeout in seconds, or None to wait indefinitely.
            The CPU call gets ``sample_duration`` on top, since it blocks
            for the sampling window
    """

    def __init__(
        self,
        provider: MetricProvider,
        *,
        sample_duration: float = 0.1,
        disk_path: str = "/",
        timeout: float | None = 5.0,
    ) -> None:
        self.provider = provider
        self.sample_duration = sample_duration
        self.disk_path = disk_path
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=METRIC_COUNT, thread_name_prefix="hwmon-collect")
        self._pending: dict[MetricKind, asyncio.Future[Any]] = {}

    @classmethod
    def from_config(cls, provider: MetricProvider, config: Config) -> Collector:
        """Create a collector using the sampling settings in ``config``."""
        return cls(
            provider,
            sample_duration=config.sample_duration,
            disk_path=config.disk_drive,
            timeout=config.provider_timeout,
        )

    def _call(self, kind: MetricKind) -> Any:
        """Run the blocking provider query for ``kind`` (worker thread)."""
        if kind is MetricKind.CPU:
            return self.provider.cpu_percent(self.sample_duration)
        if kind is MetricKind.MEMORY:
            return self.provider.memory_info()
        return self.provider.disk_info(self.disk_path)

    def _call_timeout(self, kind: MetricKind) -> float | None:
        """Timeout for one call; the CPU call also blocks for the sampling window."""
        if self.timeout is None:
            return None
        if kind is MetricKind.CPU:
            return self.timeout + self.sample_duration
        return self.timeout

    def _validate(self, kind: MetricKind, raw: Any) -> SampleValue:
        if kind is MetricKind.CPU:
            return _cpu_reading(raw)
        if kind is MetricKind.MEMORY:
            return _usage_reading(raw, MemoryInfo)
        return _usage_reading(raw, DiskInfo)

    async def _sample(self, kind: MetricKind) -> MetricSample:
        """Query the provider for one kind and wrap the outcome.

        Never raises except for cancellation.
        """
        start = time.perf_counter()

        def elapsed_ms() -> float:
            return (time.perf_counter() - start) * 1000

        outstanding = self._pending.get(kind)
        if outstanding is not None and not outstanding.done():
            return MetricSample.failed(kind, ProviderError("previous call still outstanding"))

        loop = asyncio.get_running_loop()
        try:
            future = loop.run_in_executor(self._executor, self._call, kind)
        except RuntimeError as e:
            # Executor already shut down
            return MetricSample.failed(kind, ProviderError(f"collector is closed: {e}"), elapsed_ms())
        future.add_done_callback(_consume_result)
        self._pending[kind] = future

        timeout = self._call_timeout(kind)
        try:
            # shield keeps the pending entry alive if this task is cancelled
            if timeout is None:
                raw = await asyncio.shield(future)
            else:
                raw = await asyncio.wait_for(asyncio.shield(future), timeout=timeout)
            value = self._validate(kind, raw)
        except TimeoutError:
            logger.debug("%s call abandoned after %.1fs", kind.value, timeout)
            return MetricSample.failed(kind, ProviderError(f"timed out after {timeout:g}s"), elapsed_ms())
        except ProviderError as e:
            return MetricSample.failed(kind, e, elapsed_ms())
        except Exception as e:
            error = ProviderError(f"{type(e).__name__}: {e}", kind)
            error.__cause__ = e
            return MetricSample.failed(kind, error, elapsed_ms())

        logger.debug("Sampled %s in %.1fms", kind.value, elapsed_ms())
        return MetricSample(kind=kind, value=value, collection_time_ms=elapsed_ms())

    async def collect(self) -> AsyncIterator[MetricSample]:
        """Sample every kind concurrently, yielding results in arrival order.

        Yields exactly one sample per kind. Wall time is bounded by the
        slowest call (or the timeout), not the sum of the calls. If the
        consumer stops early, the round's outstanding tasks are cancelled.

        Yields:
            MetricSample for each kind, as it completes
        """
        queue: asyncio.Queue[MetricSample] = asyncio.Queue(maxsize=METRIC_COUNT)

        async def produce(kind: MetricKind) -> None:
            await queue.put(await self._sample(kind))

        tasks = [asyncio.create_task(produce(kind), name=f"hwmon-collect-{kind.value}") for kind in MetricKind]
        try:
            for _ in range(len(tasks)):
                yield await queue.get()
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def collect_all(self) -> list[MetricSample]:
        """Run one round and return all samples in arrival order."""
        return [sample async for sample in self.collect()]

    def close(self) -> None:
        """Shut down the worker pool without waiting for running calls."""
        self._executor.shutdown(wait=False, cancel_futures=True)
