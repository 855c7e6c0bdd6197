"""Sentry SDK integration for hwmon.

This module provides:
- Opt-in Sentry initialization with asyncio support
- Logging integration (ERROR logs, including failed samples, become events)
- Context, tags, and breadcrumb helpers

Sentry is only initialized when a DSN is configured. Every helper here is
safe to call either way; the SDK ignores calls made before ``init``.

Usage:
    from hwmon.sentry import init_sentry, set_hwmon_context, add_breadcrumb

    init_sentry(config.sentry)  # Call at startup
    set_hwmon_context(mode="tui", refresh_interval=1.0, disk_drive="/")
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from typing import TYPE_CHECKING, Any

import sentry_sdk
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from hwmon import __version__

if TYPE_CHECKING:
    from hwmon.config.loader import SentryConfig

logger = logging.getLogger(__name__)


def init_sentry(sentry_config: SentryConfig, *, debug: bool = False) -> bool:
    """Initialize Sentry SDK when a DSN is configured.

    Configures Sentry with:
    - AsyncioIntegration for async task error capture
    - LoggingIntegration: INFO+ as breadcrumbs, ERROR+ as events
    - System context (OS, Python version, architecture)
    - Default tags for filtering

    Args:
        sentry_config: The ``sentry`` section of the loaded config
        debug: Enable Sentry debug mode for troubleshooting

    Returns:
        True if Sentry was initialized, False if no DSN is configured
    """
    if not sentry_config.dsn:
        logger.debug("Sentry disabled: no DSN configured")
        return False

    sentry_sdk.init(
        dsn=sentry_config.dsn,
        debug=debug,
        send_default_pii=False,
        environment=sentry_config.environment,
        release=f"hwmon@{__version__}",
        integrations=[
            AsyncioIntegration(),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        before_send=_before_send,
    )

    sentry_sdk.set_tag("app.version", __version__)
    sentry_sdk.set_tag("python.version", platform.python_version())
    sentry_sdk.set_tag("os.name", platform.system())
    sentry_sdk.set_tag("arch", platform.machine())

    set_system_context()
    logger.info("Sentry initialized (environment=%s)", sentry_config.environment)
    return True


def _before_send(
    event: dict[str, Any],
    hint: dict[str, Any],
) -> dict[str, Any] | None:
    """Process events before sending to Sentry.

    Args:
        event: The event dictionary
        hint: Additional context about the event

    Returns:
        The event to send, or None to drop it
    """
    event.setdefault("extra", {})["cwd"] = os.getcwd()

    # Ctrl+C is a normal way to leave the monitor
    if "exc_info" in hint:
        exc_type, _, _ = hint["exc_info"]
        if exc_type is KeyboardInterrupt:
            return None

    return event


def set_system_context() -> None:
    """Set system-level context for all events."""
    sentry_sdk.set_context("system", {
        "os": platform.system(),
        "os_version": platform.release(),
        "python_version": platform.python_version(),
        "python_implementation": platform.python_implementation(),
        "architecture": platform.machine(),
        "terminal": os.environ.get("TERM", "unknown"),
        "is_tty": sys.stdout.isatty(),
    })


def set_hwmon_context(
    *,
    mode: str | None = None,
    refresh_interval: float | None = None,
    disk_drive: str | None = None,
    config_path: str | None = None,
    debug_mode: bool = False,
) -> None:
    """Set hwmon-specific context for error tracking.

    Args:
        mode: Current mode (tui, once, stream)
        refresh_interval: Seconds between collection rounds
        disk_drive: Volume sampled for disk metrics
        config_path: Path to config file if custom
        debug_mode: Whether debug mode is enabled
    """
    context: dict[str, Any] = {}

    if mode is not None:
        context["mode"] = mode
        sentry_sdk.set_tag("hwmon.mode", mode)

    if refresh_interval is not None:
        context["refresh_interval"] = refresh_interval

    if disk_drive is not None:
        context["disk_drive"] = disk_drive

    if config_path is not None:
        context["config_path"] = config_path
        sentry_sdk.set_tag("hwmon.custom_config", "true")

    context["debug_mode"] = debug_mode
    if debug_mode:
        sentry_sdk.set_tag("hwmon.debug", "true")

    sentry_sdk.set_context("hwmon", context)


def add_breadcrumb(
    message: str,
    category: str = "hwmon",
    level: str = "info",
    data: dict[str, Any] | None = None,
) -> None:
    """Add a breadcrumb for debugging.

    Args:
        message: Description of the event
        category: Category for grouping (e.g., "scheduler", "config")
        level: Severity level (debug, info, warning, error)
        data: Additional data to attach
    """
    sentry_sdk.add_breadcrumb(
        message=message,
        category=category,
        level=level,
        data=data,
    )
