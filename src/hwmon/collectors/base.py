"""Per-call collection results.

MetricSample is the unit that flows from the Collector to the Aggregator:
one provider call's outcome, either a reading or the error that replaced it.
"""

from dataclasses import dataclass, field
from datetime import datetime

from hwmon.errors import ProviderError
from hwmon.models.base import DiskInfo, MemoryInfo, MetricKind, _utcnow

SampleValue = float | MemoryInfo | DiskInfo


@dataclass
class MetricSample:
    """Outcome of sampling one metric kind.

    Exactly one of ``value`` and ``error`` is set.

    Attributes:
        kind: The metric kind this sample belongs to
        value: The reading (float for CPU, MemoryInfo, DiskInfo) on success
        error: The failure reason on failure
        collection_time_ms: How long the provider call took in milliseconds
        timestamp: When the sample was produced
    """

    kind: MetricKind
    value: SampleValue | None = None
    error: ProviderError | None = None
    collection_time_ms: float = 0.0
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        """Validate sample consistency."""
        if self.value is None and self.error is None:
            raise ValueError("Sample must include a value or an error")
        if self.value is not None and self.error is not None:
            raise ValueError("Sample cannot include both a value and an error")

    @property
    def success(self) -> bool:
        """Whether the provider call produced a usable reading."""
        return self.error is None

    @classmethod
    def failed(cls, kind: MetricKind, error: ProviderError, collection_time_ms: float = 0.0) -> "MetricSample":
        """Build a failed sample, tagging ``error`` with ``kind``."""
        return cls(kind=kind, error=error.with_kind(kind), collection_time_ms=collection_time_ms)
