"""JSON output formatter for hwmon.

Serializes a Snapshot as one JSON document, grouped by metric kind. Each
group carries an ``available`` flag so consumers can tell a failed sample
apart from a genuine zero reading.
"""

from __future__ import annotations

import json
from typing import Any

from hwmon.models.base import KIND_FIELDS, Snapshot


class JsonFormatter:
    """JSON formatter for headless output.

    Attributes:
        pretty_print: Whether to format with indentation
        hostname: Host name included in the output, if set

    Example:
        >>> formatter = JsonFormatter(pretty_print=True, hostname="myhost")
        >>> print(formatter.format(snapshot))
        {
          "timestamp": "2024-01-15T10:30:00+00:00",
          "hostname": "myhost",
          "disk_drive": "/",
          "cpu": {"percent": 12.5, "available": true},
          ...
        }
    """

    name: str = "json"

    def __init__(self, pretty_print: bool = True, hostname: str | None = None) -> None:
        self.pretty_print = pretty_print
        self.hostname = hostname

    def to_dict(self, snapshot: Snapshot) -> dict[str, Any]:
        """Build the JSON-compatible structure for ``snapshot``."""
        output: dict[str, Any] = {"timestamp": snapshot.timestamp.isoformat()}
        if self.hostname:
            output["hostname"] = self.hostname
        output["disk_drive"] = snapshot.disk_drive

        for kind, fields in KIND_FIELDS.items():
            prefix = f"{kind.value}_"
            group: dict[str, Any] = {
                name.removeprefix(prefix): getattr(snapshot, name) for name in fields
            }
            group["available"] = snapshot.is_available(kind)
            output[kind.value] = group

        return output

    def format(self, snapshot: Snapshot) -> str:
        """Format a snapshot as a JSON string."""
        output = self.to_dict(snapshot)
        if self.pretty_print:
            return json.dumps(output, indent=2, ensure_ascii=False)
        return json.dumps(output, ensure_ascii=False, separators=(",", ":"))
