"""Default configuration values for hwmon.

This module defines the default configuration used when no config file exists
or when config values are not specified. All configuration options are documented
here for reference.

Environment Variables:
    HWMON_CONFIG_PATH: Override default config file path
    Any config value can reference environment variables using ${VAR} syntax

Config File Locations (in order of precedence):
    1. Path specified via --config CLI flag
    2. Path specified via HWMON_CONFIG_PATH environment variable
    3. ~/.config/hwmon/config.yaml (XDG default)
    4. ~/.hwmon/config.yaml (legacy location)
"""

import os
import sys
from typing import Any


def default_disk_drive() -> str:
    """Return the platform system volume.

    Windows uses the ``SystemDrive`` root (normally ``C:\\``); everything else
    uses the filesystem root.
    """
    if sys.platform == "win32":
        return os.environ.get("SystemDrive", "C:") + "\\"
    return "/"


DEFAULT_CONFIG: dict[str, Any] = {
    # Core settings
    "refresh_interval": 1.0,  # Seconds between collection rounds
    "sample_duration": 0.1,  # Seconds spent measuring CPU usage per round
    "disk_drive": default_disk_drive(),  # Volume sampled for disk usage
    "provider_timeout": 5.0,  # Per-call timeout in seconds (null disables)
    # Display preferences
    "display": {
        "decimal_places": 1,
        "time_format": "%H:%M:%S",
    },
    # Headless output settings
    "cli": {
        "default_format": "json",  # json or prometheus
        "pretty_print": True,
    },
    # Logging configuration (file only; the TUI owns the terminal)
    "logging": {
        "enabled": False,
        "level": "INFO",  # DEBUG, INFO, WARNING, ERROR
        "file": "~/.hwmon/hwmon.log",
    },
    # Error reporting (disabled unless a DSN is configured)
    "sentry": {
        "dsn": None,
        "environment": "production",
    },
}
