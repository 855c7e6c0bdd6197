"""Tests for the Prometheus metrics formatter.

Test categories:
- Metric name and label sanitization
- Series for each available gauge field
- Availability gauge and omission of failed kinds
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from hwmon.formatters.prometheus import (
    PrometheusFormatter,
    _format_labels,
    _sanitize_label_value,
    _sanitize_metric_name,
)
from hwmon.models import MetricKind, Snapshot

FIXED_TIME = datetime(2024, 1, 15, 10, 30, 0, tzinfo=UTC)
FIXED_MS = 1705314600000


@pytest.fixture
def snapshot() -> Snapshot:
    return Snapshot(
        cpu_percent=45.2,
        memory_percent=50.0,
        memory_used_gb=8.0,
        memory_total_gb=16.0,
        disk_percent=25.0,
        disk_used_gb=100.0,
        disk_total_gb=400.0,
        disk_drive="/",
        timestamp=FIXED_TIME,
    )


class TestMetricNaming:
    """Test metric name sanitization and formatting."""

    def test_sanitize_special_characters(self) -> None:
        assert _sanitize_metric_name("metric-name") == "metric_name"
        assert _sanitize_metric_name("metric.name") == "metric_name"
        assert _sanitize_metric_name("metric name") == "metric_name"

    def test_sanitize_leading_digit(self) -> None:
        assert _sanitize_metric_name("123metric") == "_123metric"

    def test_sanitize_colons_allowed(self) -> None:
        assert _sanitize_metric_name("namespace:metric") == "namespace:metric"


class TestLabelFormatting:
    """Test label formatting and escaping."""

    def test_empty_labels(self) -> None:
        assert _format_labels({}) == ""

    def test_multiple_labels(self) -> None:
        assert _format_labels({"host": "a", "drive": "/"}) == '{host="a",drive="/"}'

    def test_escape_label_values(self) -> None:
        assert _sanitize_label_value('say "hi"') == 'say \\"hi\\"'
        assert _sanitize_label_value("a\nb") == "a\\nb"
        assert _sanitize_label_value("C:\\") == "C:\\\\"


class TestPrometheusOutput:
    """Test the exposition text for a snapshot."""

    def test_name(self) -> None:
        assert PrometheusFormatter().name == "prometheus"

    def test_gauge_series(self, snapshot: Snapshot) -> None:
        output = PrometheusFormatter(hostname="myhost").format(snapshot)

        assert "# HELP hwmon_cpu_percent CPU usage percentage" in output
        assert "# TYPE hwmon_cpu_percent gauge" in output
        assert f'hwmon_cpu_percent{{host="myhost"}} 45.2 {FIXED_MS}' in output
        assert f'hwmon_memory_total_gb{{host="myhost"}} 16.0 {FIXED_MS}' in output

    def test_disk_series_carry_drive_label(self, snapshot: Snapshot) -> None:
        output = PrometheusFormatter(hostname="myhost").format(snapshot)
        assert f'hwmon_disk_used_gb{{host="myhost",drive="/"}} 100.0 {FIXED_MS}' in output

    def test_every_field_is_a_gauge(self, snapshot: Snapshot) -> None:
        output = PrometheusFormatter().format(snapshot)
        type_lines = [line for line in output.splitlines() if line.startswith("# TYPE")]
        assert len(type_lines) == 8
        assert all(line.endswith(" gauge") for line in type_lines)

    def test_without_help_or_timestamp(self, snapshot: Snapshot) -> None:
        output = PrometheusFormatter(include_help=False, include_timestamp=False).format(snapshot)
        assert "# HELP" not in output
        assert "hwmon_cpu_percent 45.2\n" in output

    def test_custom_prefix(self, snapshot: Snapshot) -> None:
        output = PrometheusFormatter(prefix="node-hw").format(snapshot)
        assert "node_hw_cpu_percent" in output
        assert "hwmon_" not in output

    def test_ends_with_newline(self, snapshot: Snapshot) -> None:
        assert PrometheusFormatter().format(snapshot).endswith("\n")


class TestAvailability:
    """Test how failed kinds are reported."""

    def test_all_available(self, snapshot: Snapshot) -> None:
        output = PrometheusFormatter(include_timestamp=False).format(snapshot)
        for kind in MetricKind:
            assert f'hwmon_metric_available{{kind="{kind.value}"}} 1' in output

    def test_unavailable_kind_is_omitted(self) -> None:
        snapshot = Snapshot(
            cpu_percent=10.0,
            disk_drive="/",
            unavailable=frozenset({MetricKind.MEMORY}),
        )
        output = PrometheusFormatter(include_timestamp=False).format(snapshot)

        assert "hwmon_memory_percent" not in output
        assert "hwmon_cpu_percent 10.0" in output
        assert 'hwmon_disk_percent{drive="/"} 0.0' in output
        assert 'hwmon_metric_available{kind="memory"} 0' in output
        assert 'hwmon_metric_available{kind="cpu"} 1' in output

    def test_empty_snapshot_only_reports_availability(self) -> None:
        output = PrometheusFormatter(include_help=False, include_timestamp=False).format(
            Snapshot.empty("/")
        )
        assert output.splitlines() == [
            "# TYPE hwmon_metric_available gauge",
            'hwmon_metric_available{kind="cpu"} 0',
            'hwmon_metric_available{kind="memory"} 0',
            'hwmon_metric_available{kind="disk"} 0',
        ]
