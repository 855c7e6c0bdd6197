"""Pydantic data models for hwmon.

This module defines the data that flows through one collection round:
- MetricKind: The three sampled metric kinds (CPU, memory, disk)
- MemoryInfo, DiskInfo: Normalized provider readings
- Snapshot: Immutable merge of one round's readings
- MetricType: Semantic metric types used by formatters (gauge)
- gauge_field: Field factory that tags a field with its metric type
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.fields import FieldInfo

# Fixed divisor for byte -> gigabyte conversion
BYTES_PER_GB = 1024**3


class MetricKind(str, Enum):
    """Kinds of metric sampled in every round."""

    CPU = "cpu"
    MEMORY = "memory"
    DISK = "disk"


# Number of samples in a round; one per kind
METRIC_COUNT = len(MetricKind)


class MetricType(str, Enum):
    """Semantic types for metrics; values are Prometheus TYPE names.

    Attributes:
        GAUGE: Value that can go up and down, representing current state.
    """

    GAUGE = "gauge"


def _metric_field(
    metric_type: MetricType,
    description: str = "",
    **kwargs: Any,
) -> Any:
    """Create a Pydantic Field with metric type metadata.

    Args:
        metric_type: The semantic type of this metric
        description: Human-readable description of the metric
        **kwargs: Additional Field arguments (ge, le, default, etc.)

    Returns:
        A Pydantic Field with json_schema_extra containing metric_type
    """
    extra = kwargs.pop("json_schema_extra", {})
    if isinstance(extra, dict):
        extra = {**extra, "metric_type": metric_type.value}
    else:
        extra = {"metric_type": metric_type.value}

    return Field(description=description, json_schema_extra=extra, **kwargs)


def gauge_field(description: str = "", **kwargs: Any) -> Any:
    """Create a gauge metric field.

    Gauges represent current values that can go up and down.

    Example:
        cpu_percent: float = gauge_field("Current CPU usage", ge=0, le=100)
    """
    return _metric_field(MetricType.GAUGE, description, **kwargs)


def get_metric_type(model: type[BaseModel], field_name: str) -> MetricType | None:
    """Extract the metric type from a model field.

    Args:
        model: The Pydantic model class
        field_name: Name of the field to inspect

    Returns:
        The MetricType if annotated, None otherwise
    """
    if field_name not in model.model_fields:
        return None

    field_info: FieldInfo = model.model_fields[field_name]

    extra = field_info.json_schema_extra
    if isinstance(extra, dict) and "metric_type" in extra:
        try:
            return MetricType(extra["metric_type"])
        except ValueError:
            return None

    return None


def get_all_metric_types(model: type[BaseModel]) -> dict[str, MetricType]:
    """Get metric types for all annotated fields in a model.

    Returns:
        Dictionary mapping field names to their MetricType, in field order
    """
    result: dict[str, MetricType] = {}
    for field_name in model.model_fields:
        metric_type = get_metric_type(model, field_name)
        if metric_type is not None:
            result[field_name] = metric_type
    return result


def bytes_to_gb(value: int | float) -> float:
    """Convert a byte count to gigabytes using the fixed 1024**3 divisor."""
    return float(value) / BYTES_PER_GB


def _utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


class MemoryInfo(BaseModel):
    """Normalized memory reading.

    ``used_bytes <= total_bytes`` is a provider guarantee and is not checked.
    """

    model_config = ConfigDict(frozen=True)

    used_percent: float = Field(..., ge=0.0, le=100.0)
    used_bytes: int = Field(..., ge=0)
    total_bytes: int = Field(..., ge=0)


class DiskInfo(BaseModel):
    """Normalized disk usage reading for one volume."""

    model_config = ConfigDict(frozen=True)

    used_percent: float = Field(..., ge=0.0, le=100.0)
    used_bytes: int = Field(..., ge=0)
    total_bytes: int = Field(..., ge=0)


# Snapshot fields owned by each kind; zeroed when the kind is unavailable
KIND_FIELDS: dict[MetricKind, tuple[str, ...]] = {
    MetricKind.CPU: ("cpu_percent",),
    MetricKind.MEMORY: ("memory_percent", "memory_used_gb", "memory_total_gb"),
    MetricKind.DISK: ("disk_percent", "disk_used_gb", "disk_total_gb"),
}


class Snapshot(BaseModel):
    """Immutable result of one collection round.

    Every numeric field holds either a valid non-negative reading or 0.0,
    which means the metric was unavailable this round. ``unavailable`` lists
    the kinds whose fields are zero because sampling failed, so a presenter
    can tell "failed" apart from "reads zero".

    Attributes:
        cpu_percent: Overall CPU usage (0-100) [gauge]
        memory_percent: Memory usage percentage [gauge]
        memory_used_gb: Memory in use, GB [gauge]
        memory_total_gb: Total memory, GB [gauge]
        disk_percent: Disk usage percentage [gauge]
        disk_used_gb: Disk space in use, GB [gauge]
        disk_total_gb: Total disk space, GB [gauge]
        disk_drive: Volume the disk metrics were sampled from
        unavailable: Kinds that failed or were missing this round
        timestamp: When the round completed (UTC)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    cpu_percent: float = gauge_field("CPU usage percentage", default=0.0, ge=0.0, le=100.0)
    memory_percent: float = gauge_field("Memory usage percentage", default=0.0, ge=0.0)
    memory_used_gb: float = gauge_field("Memory used in GB", default=0.0, ge=0.0)
    memory_total_gb: float = gauge_field("Total memory in GB", default=0.0, ge=0.0)
    disk_percent: float = gauge_field("Disk usage percentage", default=0.0, ge=0.0)
    disk_used_gb: float = gauge_field("Disk used in GB", default=0.0, ge=0.0)
    disk_total_gb: float = gauge_field("Total disk space in GB", default=0.0, ge=0.0)
    disk_drive: str = Field(default="", description="Sampled volume")
    unavailable: frozenset[MetricKind] = Field(default_factory=frozenset)
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def empty(cls, disk_drive: str = "") -> "Snapshot":
        """Build a snapshot with every metric unavailable."""
        return cls(disk_drive=disk_drive, unavailable=frozenset(MetricKind))

    def is_available(self, kind: MetricKind) -> bool:
        """Check whether ``kind`` was sampled successfully this round."""
        return kind not in self.unavailable

    def age_seconds(self) -> float:
        """Return how old this snapshot is in seconds."""
        return (_utcnow() - self.timestamp).total_seconds()
