"""Command-line interface for hwmon.

This module provides:
- Typer-based CLI application
- Mode detection (TUI, single snapshot, stream)
- Config file loading with CLI overrides
- Logging and error reporting setup

Usage:
    hwmon                       # TUI mode (default if TTY)
    hwmon --json                # One JSON snapshot (format flag implies --once)
    hwmon --prometheus --stream # Prometheus text every refresh interval

Examples:
    # Refresh every 2 seconds, monitoring a data volume
    hwmon --interval 2 --disk /data

    # Use a custom configuration file
    hwmon --config ~/.config/hwmon/custom.yaml
"""

from enum import Enum
from pathlib import Path
import sys
from typing import Annotated, Any

from rich.console import Console
import typer

from hwmon import __version__
from hwmon.config import Config, ConfigError, load_config
from hwmon.logging_config import configure_logging
from hwmon.sentry import init_sentry, set_hwmon_context

app = typer.Typer(
    name="hwmon",
    help="Terminal hardware monitor for CPU, memory and disk usage",
    no_args_is_help=False,
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    """Output format options for headless mode."""

    JSON = "json"
    PROMETHEUS = "prometheus"


class RunMode(str, Enum):
    """How hwmon presents snapshots."""

    TUI = "tui"
    ONCE = "once"
    STREAM = "stream"


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        console.print(f"hwmon version {__version__}")
        raise typer.Exit()


def detect_mode(once: bool, stream: bool, format_specified: bool) -> RunMode:
    """Decide how to present snapshots.

    Mode detection logic:
    1. --stream streams formatted snapshots
    2. --once or a format flag prints one snapshot
    3. An interactive terminal gets the TUI
    4. Otherwise, print one snapshot

    Returns:
        The RunMode to use
    """
    if stream:
        return RunMode.STREAM
    if once or format_specified:
        return RunMode.ONCE
    if sys.stdin.isatty() and sys.stdout.isatty():
        return RunMode.TUI
    return RunMode.ONCE


def build_cli_overrides(
    interval: float | None = None,
    disk: str | None = None,
    sample_duration: float | None = None,
    timeout: float | None = None,
    format_: OutputFormat | None = None,
    pretty: bool | None = None,
) -> dict[str, Any]:
    """Build config override dict from CLI flags.

    Args:
        interval: Refresh interval override
        disk: Disk volume override
        sample_duration: CPU sampling window override
        timeout: Provider timeout override; 0 disables the timeout
        format_: Output format for headless mode
        pretty: Pretty-print JSON output

    Returns:
        Dictionary of config overrides
    """
    overrides: dict[str, Any] = {}

    if interval is not None:
        overrides["refresh_interval"] = interval
    if disk is not None:
        overrides["disk_drive"] = disk
    if sample_duration is not None:
        overrides["sample_duration"] = sample_duration
    if timeout is not None:
        overrides["provider_timeout"] = timeout if timeout > 0 else None

    cli_overrides: dict[str, Any] = {}
    if format_ is not None:
        cli_overrides["default_format"] = format_.value
    if pretty is not None:
        cli_overrides["pretty_print"] = pretty

    if cli_overrides:
        overrides["cli"] = cli_overrides

    return overrides


ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to custom config file",
        envvar="HWMON_CONFIG_PATH",
        exists=False,  # We handle existence check ourselves
    ),
]

IntervalOption = Annotated[
    float | None,
    typer.Option(
        "--interval",
        "-i",
        help="Refresh interval in seconds",
        min=0.1,
        max=3600,
    ),
]

DiskOption = Annotated[
    str | None,
    typer.Option(
        "--disk",
        "-d",
        help="Volume to report disk usage for (default: system volume)",
    ),
]

SampleDurationOption = Annotated[
    float | None,
    typer.Option(
        "--sample-duration",
        help="Seconds spent measuring CPU usage each round",
        min=0.0,
        max=60,
    ),
]

TimeoutOption = Annotated[
    float | None,
    typer.Option(
        "--timeout",
        help="Per-query timeout in seconds (0 disables)",
        min=0.0,
    ),
]

OnceOption = Annotated[
    bool,
    typer.Option(
        "--once",
        "-o",
        help="Print one snapshot and exit",
    ),
]

StreamOption = Annotated[
    bool,
    typer.Option(
        "--stream",
        "-s",
        help="Print a snapshot every refresh interval until interrupted",
    ),
]

JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        "-j",
        help="Output in JSON format (implies --once unless --stream)",
    ),
]

PrometheusOption = Annotated[
    bool,
    typer.Option(
        "--prometheus",
        help="Output in Prometheus format (implies --once unless --stream)",
    ),
]

PrettyOption = Annotated[
    bool | None,
    typer.Option(
        "--pretty/--no-pretty",
        help="Pretty-print JSON output (default: True)",
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Log at DEBUG level",
    ),
]

VersionOption = Annotated[
    bool | None,
    typer.Option(
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: ConfigOption = None,
    interval: IntervalOption = None,
    disk: DiskOption = None,
    sample_duration: SampleDurationOption = None,
    timeout: TimeoutOption = None,
    once: OnceOption = False,
    stream: StreamOption = False,
    json_format: JsonOption = False,
    prometheus_format: PrometheusOption = False,
    pretty: PrettyOption = None,
    debug: DebugOption = False,
    version: VersionOption = None,
) -> None:
    """hwmon - CPU, memory and disk usage at a glance.

    By default, runs the TUI if connected to a terminal.
    Use format flags (--json, --prometheus) for headless output.

    Examples:

        hwmon                          Start the interactive monitor

        hwmon --json                   Print one JSON snapshot

        hwmon --prometheus --stream    Stream metrics in Prometheus format
    """
    if ctx.invoked_subcommand is not None:
        return

    if once and stream:
        err_console.print("[red]Error:[/red] --once and --stream cannot be combined")
        raise typer.Exit(2)

    output_format: OutputFormat | None = None
    if json_format:
        output_format = OutputFormat.JSON
    elif prometheus_format:
        output_format = OutputFormat.PROMETHEUS

    mode = detect_mode(once, stream, output_format is not None)

    overrides = build_cli_overrides(
        interval=interval,
        disk=disk,
        sample_duration=sample_duration,
        timeout=timeout,
        format_=output_format,
        pretty=pretty,
    )

    config_path = str(config) if config else None
    try:
        cfg = load_config(config_path=config_path, cli_overrides=overrides)
    except FileNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1) from e

    try:
        configure_logging(cfg.logging, debug=debug)
    except OSError as e:
        err_console.print(f"[yellow]Warning: could not open log file: {e}[/yellow]")

    if init_sentry(cfg.sentry, debug=debug):
        set_hwmon_context(
            mode=mode.value,
            refresh_interval=cfg.refresh_interval,
            disk_drive=cfg.disk_drive,
            config_path=config_path,
            debug_mode=debug,
        )

    exit_code = run_hwmon(cfg, mode)
    if exit_code != 0:
        raise typer.Exit(exit_code)


def run_hwmon(config: Config, mode: RunMode) -> int:
    """Run hwmon in ``mode`` with the given configuration.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if mode is RunMode.TUI:
        # Import here to avoid loading Textual when not needed
        from hwmon.tui import run_app

        return run_app(config)

    from hwmon.cli_runner import run_cli_mode

    return run_cli_mode(
        format_name=config.cli.default_format,
        config=config,
        stream=mode is RunMode.STREAM,
    )


def cli_main() -> None:
    """Entry point for the CLI application."""
    app()
