"""Tests for the JSON output formatter and the stream presenter."""

from datetime import UTC, datetime
import io
import json

import pytest

from hwmon.formatters import JsonFormatter
from hwmon.models import MetricKind, Snapshot
from hwmon.presenter import FormatterPresenter, Presenter

FIXED_TIME = datetime(2024, 1, 15, 10, 30, 0, tzinfo=UTC)


@pytest.fixture
def full_snapshot() -> Snapshot:
    return Snapshot(
        cpu_percent=12.5,
        memory_percent=50.0,
        memory_used_gb=8.0,
        memory_total_gb=16.0,
        disk_percent=25.0,
        disk_used_gb=100.0,
        disk_total_gb=400.0,
        disk_drive="/",
        timestamp=FIXED_TIME,
    )


# ============================================================================
# JsonFormatter
# ============================================================================


class TestJsonFormatter:
    """Tests for JsonFormatter output structure."""

    def test_name(self) -> None:
        assert JsonFormatter().name == "json"

    def test_structure(self, full_snapshot: Snapshot) -> None:
        data = json.loads(JsonFormatter(hostname="myhost").format(full_snapshot))

        assert data["timestamp"] == "2024-01-15T10:30:00+00:00"
        assert data["hostname"] == "myhost"
        assert data["disk_drive"] == "/"
        assert data["cpu"] == {"percent": 12.5, "available": True}
        assert data["memory"] == {
            "percent": 50.0,
            "used_gb": 8.0,
            "total_gb": 16.0,
            "available": True,
        }
        assert data["disk"] == {
            "percent": 25.0,
            "used_gb": 100.0,
            "total_gb": 400.0,
            "available": True,
        }

    def test_hostname_omitted_when_unset(self, full_snapshot: Snapshot) -> None:
        data = JsonFormatter().to_dict(full_snapshot)
        assert "hostname" not in data

    def test_unavailable_kind_is_flagged(self) -> None:
        snapshot = Snapshot(
            cpu_percent=30.0,
            disk_drive="/",
            unavailable=frozenset({MetricKind.MEMORY, MetricKind.DISK}),
        )
        data = JsonFormatter().to_dict(snapshot)

        assert data["cpu"]["available"] is True
        assert data["memory"] == {
            "percent": 0.0,
            "used_gb": 0.0,
            "total_gb": 0.0,
            "available": False,
        }
        assert data["disk"]["available"] is False

    def test_pretty_print(self, full_snapshot: Snapshot) -> None:
        output = JsonFormatter(pretty_print=True).format(full_snapshot)
        assert "\n" in output
        assert '  "cpu"' in output

    def test_compact(self, full_snapshot: Snapshot) -> None:
        output = JsonFormatter(pretty_print=False).format(full_snapshot)
        assert "\n" not in output
        assert '"cpu":{"percent":12.5,"available":true}' in output

    def test_empty_snapshot(self) -> None:
        data = JsonFormatter().to_dict(Snapshot.empty("C:\\"))
        assert data["disk_drive"] == "C:\\"
        assert not any(data[kind.value]["available"] for kind in MetricKind)


# ============================================================================
# FormatterPresenter
# ============================================================================


class TestFormatterPresenter:
    """Tests for writing formatted snapshots to a stream."""

    def test_is_presenter(self) -> None:
        assert isinstance(FormatterPresenter(JsonFormatter()), Presenter)

    def test_render_writes_one_line_per_snapshot(self, full_snapshot: Snapshot) -> None:
        stream = io.StringIO()
        presenter = FormatterPresenter(JsonFormatter(pretty_print=False), stream)

        presenter.initialize()
        presenter.render(full_snapshot)
        presenter.render(full_snapshot)
        presenter.close()

        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        assert presenter.rendered == 2
        assert json.loads(lines[0])["cpu"]["percent"] == 12.5

    def test_trailing_newline_not_doubled(self, full_snapshot: Snapshot) -> None:
        class LineFormatter:
            def format(self, snapshot: Snapshot) -> str:
                return f"{snapshot.cpu_percent}\n"

        stream = io.StringIO()
        FormatterPresenter(LineFormatter(), stream).render(full_snapshot)
        assert stream.getvalue() == "12.5\n"

    def test_resize_is_ignored(self, full_snapshot: Snapshot) -> None:
        stream = io.StringIO()
        presenter = FormatterPresenter(JsonFormatter(), stream)
        presenter.on_resize(80, 24)
        assert stream.getvalue() == ""
