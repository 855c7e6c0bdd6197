"""Headless runners for hwmon.

This module provides the implementation for the non-interactive modes:
- Single snapshot collection (--once)
- Streaming one formatted snapshot per refresh (--stream)

Both use the same Collector and Aggregator as the TUI; streaming also uses
the Scheduler, with SIGINT and SIGTERM mapped to Quit.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from typing import TYPE_CHECKING, TextIO

from rich.console import Console

from hwmon.collectors.aggregator import Aggregator
from hwmon.collectors.collector import Collector
from hwmon.collectors.events import QueueEventSource
from hwmon.collectors.scheduler import Scheduler
from hwmon.errors import InitializationError
from hwmon.formatters import JsonFormatter, PrometheusFormatter
from hwmon.presenter import FormatterPresenter
from hwmon.providers.psutil_provider import PsutilProvider

if TYPE_CHECKING:
    from hwmon.config.loader import Config
    from hwmon.models.base import Snapshot
    from hwmon.providers.base import MetricProvider

console = Console(stderr=True)
logger = logging.getLogger(__name__)


def get_formatter(
    format_name: str,
    config: Config,
    *,
    pretty_print: bool | None = None,
) -> JsonFormatter | PrometheusFormatter:
    """Get a formatter by name.

    Args:
        format_name: The format name (json, prometheus)
        config: Application configuration
        pretty_print: Override ``config.cli.pretty_print`` for JSON

    Returns:
        Formatter instance

    Raises:
        ValueError: If format is not recognized
    """
    hostname = socket.gethostname()
    if format_name == "json":
        pretty = config.cli.pretty_print if pretty_print is None else pretty_print
        return JsonFormatter(pretty_print=pretty, hostname=hostname)
    if format_name == "prometheus":
        return PrometheusFormatter(hostname=hostname)
    raise ValueError(f"Unknown format: {format_name}. Available: json, prometheus")


async def collect_snapshot(config: Config, provider: MetricProvider) -> Snapshot:
    """Run a single collection round without a scheduler."""
    collector = Collector.from_config(provider, config)
    try:
        samples = await collector.collect_all()
    finally:
        collector.close()
    return Aggregator(config.disk_drive).merge(samples)


async def run_once(
    format_name: str,
    config: Config,
    provider: MetricProvider | None = None,
    stream: TextIO | None = None,
) -> int:
    """Collect one snapshot and print it.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        formatter = get_formatter(format_name, config)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    snapshot = await collect_snapshot(config, provider if provider is not None else PsutilProvider())
    FormatterPresenter(formatter, stream).render(snapshot)
    return 0


async def run_stream(
    format_name: str,
    config: Config,
    provider: MetricProvider | None = None,
    stream: TextIO | None = None,
) -> int:
    """Print one snapshot per refresh interval until interrupted.

    JSON is written compact, one document per line (NDJSON).

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        formatter = get_formatter(format_name, config, pretty_print=False)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    scheduler = Scheduler(
        config,
        provider if provider is not None else PsutilProvider(),
        FormatterPresenter(formatter, stream),
        QueueEventSource(handle_signals=True),
    )
    try:
        await scheduler.run()
    except InitializationError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    return 0


def run_cli_mode(
    format_name: str = "json",
    config: Config | None = None,
    *,
    stream: bool = False,
    provider: MetricProvider | None = None,
) -> int:
    """Run hwmon in a headless mode.

    Args:
        format_name: Output format (json, prometheus)
        config: Application configuration (loaded from defaults if omitted)
        stream: If True, stream until interrupted; otherwise print once
        provider: Metric source; reads the live system when omitted

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if config is None:
        from hwmon.config import load_config

        config = load_config()

    if stream:
        try:
            return asyncio.run(run_stream(format_name, config, provider))
        except KeyboardInterrupt:
            # Graceful exit on Ctrl+C
            return 0
    return asyncio.run(run_once(format_name, config, provider))
