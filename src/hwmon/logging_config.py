"""Logging setup for hwmon.

All modules log through ``logging.getLogger(__name__)``, so everything sits
under the ``hwmon`` logger. The TUI owns the terminal, so log output only
ever goes to a file; when file logging is disabled a NullHandler keeps the
"no handlers" fallback from writing to stderr.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hwmon.config.loader import LoggingConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Marks handlers installed here so a second call can replace them
_HANDLER_ATTR = "_hwmon_handler"


def configure_logging(logging_config: LoggingConfig, debug: bool = False) -> logging.Logger:
    """Configure the ``hwmon`` logger from the ``logging`` config section.

    Args:
        logging_config: The ``logging`` section of the loaded config
        debug: Force DEBUG level regardless of the configured level

    Returns:
        The configured ``hwmon`` logger

    Raises:
        OSError: If the log file cannot be created
    """
    root = logging.getLogger("hwmon")

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            root.removeHandler(handler)
            handler.close()

    level = logging.DEBUG if debug else getattr(logging, logging_config.level)

    handler: logging.Handler
    if logging_config.enabled:
        path = Path(logging_config.file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = logging.NullHandler()

    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)
    root.setLevel(level)
    return root
