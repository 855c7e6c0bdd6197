"""Fan-in of one collection round into a Snapshot.

The Aggregator applies the partial-failure policy: a failed kind is logged
and left at zero, every other kind is copied in, and the round always
produces exactly one Snapshot.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterable
import logging
from typing import Any

from hwmon.collectors.base import MetricSample
from hwmon.models.base import (
    KIND_FIELDS,
    METRIC_COUNT,
    DiskInfo,
    MemoryInfo,
    MetricKind,
    Snapshot,
    bytes_to_gb,
)

logger = logging.getLogger(__name__)


class _RoundState:
    """Mutable accumulator for one round; frozen into a Snapshot at the end."""

    def __init__(self) -> None:
        self.fields: dict[str, Any] = {}
        self.seen: set[MetricKind] = set()
        self.failed: set[MetricKind] = set()


class Aggregator:
    """Merges a round's samples into a single Snapshot.

    Attributes:
        disk_drive: Volume name recorded on produced snapshots
        expected: Number of samples that make up a round
    """

    def __init__(self, disk_drive: str, expected: int = METRIC_COUNT) -> None:
        if expected < 1:
            raise ValueError("expected must be at least 1")
        self.disk_drive = disk_drive
        self.expected = expected

    async def aggregate(self, samples: AsyncIterable[MetricSample]) -> Snapshot:
        """Consume samples as they arrive and build the round's Snapshot.

        Stops after ``expected`` samples, counted regardless of kind. A
        stream that ends early is logged and the missing kinds are treated
        as unavailable. Never raises.

        Args:
            samples: Async stream of samples, usually ``Collector.collect()``

        Returns:
            The merged Snapshot
        """
        state = _RoundState()
        received = 0
        try:
            async for sample in samples:
                self._apply(state, sample)
                received += 1
                if received >= self.expected:
                    break
        except Exception:
            logger.exception("Sample stream failed after %d of %d samples", received, self.expected)
        finally:
            aclose = getattr(samples, "aclose", None)
            if aclose is not None:
                await aclose()

        return self._finish(state, received)

    def merge(self, samples: Iterable[MetricSample]) -> Snapshot:
        """Synchronous equivalent of ``aggregate`` for already collected samples."""
        state = _RoundState()
        received = 0
        for sample in samples:
            self._apply(state, sample)
            received += 1
            if received >= self.expected:
                break
        return self._finish(state, received)

    def _apply(self, state: _RoundState, sample: MetricSample) -> None:
        kind = sample.kind
        if kind in state.seen:
            logger.warning("Duplicate %s sample in one round; keeping the latest", kind.value)
            self._clear(state, kind)
        state.seen.add(kind)

        if sample.error is not None:
            logger.error("Error fetching %s metric: %s", kind.value, sample.error.message)
            state.failed.add(kind)
            return

        value = sample.value
        if kind is MetricKind.CPU and isinstance(value, (int, float)):
            state.fields["cpu_percent"] = float(value)
        elif kind is MetricKind.MEMORY and isinstance(value, MemoryInfo):
            state.fields["memory_percent"] = value.used_percent
            state.fields["memory_used_gb"] = bytes_to_gb(value.used_bytes)
            state.fields["memory_total_gb"] = bytes_to_gb(value.total_bytes)
        elif kind is MetricKind.DISK and isinstance(value, DiskInfo):
            state.fields["disk_percent"] = value.used_percent
            state.fields["disk_used_gb"] = bytes_to_gb(value.used_bytes)
            state.fields["disk_total_gb"] = bytes_to_gb(value.total_bytes)
        else:
            logger.error(
                "Error fetching %s metric: unexpected value of type %s",
                kind.value,
                type(value).__name__,
            )
            state.failed.add(kind)

    def _clear(self, state: _RoundState, kind: MetricKind) -> None:
        state.failed.discard(kind)
        for name in KIND_FIELDS[kind]:
            state.fields.pop(name, None)

    def _finish(self, state: _RoundState, received: int) -> Snapshot:
        if received < self.expected:
            logger.error("Sample stream ended early: got %d of %d samples", received, self.expected)

        missing = set(MetricKind) - state.seen
        unavailable = frozenset(state.failed | missing)
        try:
            return Snapshot(disk_drive=self.disk_drive, unavailable=unavailable, **state.fields)
        except ValueError:
            # A reading outside the Snapshot's bounds; keep the round alive
            logger.exception("Invalid readings in round; reporting all metrics unavailable")
            return Snapshot.empty(self.disk_drive)
