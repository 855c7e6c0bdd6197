"""Pydantic data models for hwmon.

- MetricKind: The sampled metric kinds
- MemoryInfo, DiskInfo: Normalized provider readings
- Snapshot: Immutable result of one collection round
- MetricType, gauge_field, get_metric_type: Metric type metadata
"""

from hwmon.models.base import (
    BYTES_PER_GB,
    KIND_FIELDS,
    METRIC_COUNT,
    DiskInfo,
    MemoryInfo,
    MetricKind,
    MetricType,
    Snapshot,
    bytes_to_gb,
    gauge_field,
    get_all_metric_types,
    get_metric_type,
)

__all__ = [
    # Models
    "DiskInfo",
    "MemoryInfo",
    "MetricKind",
    "Snapshot",
    # Metric types
    "MetricType",
    "gauge_field",
    "get_metric_type",
    "get_all_metric_types",
    # Constants and helpers
    "BYTES_PER_GB",
    "KIND_FIELDS",
    "METRIC_COUNT",
    "bytes_to_gb",
]
