"""Prometheus text format output for hwmon.

Renders a Snapshot in the Prometheus exposition format. Metric names and
types come from the gauge metadata on the Snapshot model, so adding a
gauge field there adds a series here.

Format specification: https://prometheus.io/docs/instrumenting/exposition_formats/
"""

from __future__ import annotations

import re

from hwmon.models.base import KIND_FIELDS, MetricKind, MetricType, Snapshot, get_all_metric_types


def _sanitize_metric_name(name: str) -> str:
    """Sanitize a metric name to comply with Prometheus naming conventions.

    Prometheus metric names must match [a-zA-Z_:][a-zA-Z0-9_:]*
    """
    sanitized = re.sub(r"[^a-zA-Z0-9_:]", "_", name)
    if sanitized and sanitized[0].isdigit():
        sanitized = "_" + sanitized
    return sanitized


def _sanitize_label_value(value: str) -> str:
    """Escape backslash, newline, and double quotes in a label value."""
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _format_labels(labels: dict[str, str]) -> str:
    """Format labels as a Prometheus label string like {foo="bar",baz="qux"}."""
    if not labels:
        return ""
    pairs = [f'{k}="{_sanitize_label_value(str(v))}"' for k, v in labels.items()]
    return "{" + ",".join(pairs) + "}"


# Snapshot field name -> owning kind
_FIELD_KINDS: dict[str, MetricKind] = {
    name: kind for kind, names in KIND_FIELDS.items() for name in names
}


class PrometheusFormatter:
    """Prometheus text format formatter.

    Series for unavailable kinds are omitted; ``<prefix>_metric_available``
    reports 1 or 0 for every kind.

    Attributes:
        prefix: Metric name prefix
        hostname: Value of the ``host`` label, if set
        include_help: Emit ``# HELP`` lines
        include_timestamp: Append the snapshot time to each sample
    """

    name: str = "prometheus"

    def __init__(
        self,
        prefix: str = "hwmon",
        hostname: str | None = None,
        include_help: bool = True,
        include_timestamp: bool = True,
    ) -> None:
        self.prefix = prefix
        self.hostname = hostname
        self.include_help = include_help
        self.include_timestamp = include_timestamp

    def format(self, snapshot: Snapshot) -> str:
        """Format a snapshot as Prometheus text.

        Example output:
            # HELP hwmon_cpu_percent CPU usage percentage
            # TYPE hwmon_cpu_percent gauge
            hwmon_cpu_percent{host="myhost"} 45.2 1705314600000
        """
        timestamp_ms = int(snapshot.timestamp.timestamp() * 1000) if self.include_timestamp else None
        base_labels = {"host": self.hostname} if self.hostname else {}
        disk_labels = {**base_labels, "drive": snapshot.disk_drive}

        lines: list[str] = []
        for field_name, metric_type in get_all_metric_types(Snapshot).items():
            kind = _FIELD_KINDS[field_name]
            if not snapshot.is_available(kind):
                continue
            labels = disk_labels if kind is MetricKind.DISK else base_labels
            description = Snapshot.model_fields[field_name].description or field_name
            lines.extend(
                self._format_scalar(
                    _sanitize_metric_name(f"{self.prefix}_{field_name}"),
                    getattr(snapshot, field_name),
                    labels,
                    metric_type,
                    description,
                    timestamp_ms,
                )
            )

        available_name = _sanitize_metric_name(f"{self.prefix}_metric_available")
        if self.include_help:
            lines.append(f"# HELP {available_name} Whether the metric kind was sampled this round")
        lines.append(f"# TYPE {available_name} gauge")
        for kind in MetricKind:
            value = 1 if snapshot.is_available(kind) else 0
            lines.append(self._sample_line(available_name, value, {**base_labels, "kind": kind.value}, timestamp_ms))

        return "\n".join(lines) + "\n"

    def _format_scalar(
        self,
        metric_name: str,
        value: float,
        labels: dict[str, str],
        metric_type: MetricType,
        description: str,
        timestamp_ms: int | None,
    ) -> list[str]:
        lines: list[str] = []
        if self.include_help:
            lines.append(f"# HELP {metric_name} {description}")
        lines.append(f"# TYPE {metric_name} {metric_type.value}")
        lines.append(self._sample_line(metric_name, value, labels, timestamp_ms))
        return lines

    def _sample_line(
        self,
        metric_name: str,
        value: float,
        labels: dict[str, str],
        timestamp_ms: int | None,
    ) -> str:
        label_str = _format_labels(labels)
        if timestamp_ms is not None:
            return f"{metric_name}{label_str} {value} {timestamp_ms}"
        return f"{metric_name}{label_str} {value}"
