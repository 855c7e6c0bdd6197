"""Output formatters for headless mode.

- JsonFormatter: One JSON document per snapshot
- PrometheusFormatter: Prometheus text exposition format
"""

from hwmon.formatters.json_formatter import JsonFormatter
from hwmon.formatters.prometheus import PrometheusFormatter

__all__ = [
    "JsonFormatter",
    "PrometheusFormatter",
]
