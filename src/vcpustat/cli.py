"""CLI for vcpustat.

Provides a command-line interface using Typer for:
- Running the vCPU usage monitor
- Validating a configuration (dry run)
- Generating a sample configuration file
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vcpustat import __version__
from vcpustat.core.config import load_config
from vcpustat.core.constants import DISABLED_LEVEL
from vcpustat.core.schemas import MonitorConfig
from vcpustat.monitoring.discovery import DiscoveryError
from vcpustat.monitoring.orchestrator import SamplingOrchestrator
from vcpustat.monitoring.trigger import PreconditionError, SysrqTrigger, check_panic_preconditions
from vcpustat.utils.logging import get_logger, setup_logging

app = typer.Typer(
    name="vcpustat",
    help="Report per-vCPU CPU usage of running QEMU machines and catch stuck vCPUs",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"vcpustat version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Display version information and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """vCPU usage monitor for KVM hosts."""


@app.command()
def run(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to configuration file (YAML/JSON)"
    ),
    interval: int | None = typer.Option(None, "--interval", "-i", help="Interval in seconds"),
    print_level: int | None = typer.Option(
        None,
        "--print-level",
        "-l",
        help=f"Only print usages equal or lower than this (ns, {DISABLED_LEVEL} disables)",
    ),
    mark_level: int | None = typer.Option(
        None,
        "--mark-level",
        "-m",
        help=f"Tag usages equal or lower than this with (WARN) (ns, {DISABLED_LEVEL} disables)",
    ),
    panic_level: int | None = typer.Option(
        None,
        "--panic-level",
        "-p",
        help=f"Panic the host for usages equal or lower than this (ns, {DISABLED_LEVEL} disables)",
    ),
    settle_time: int | None = typer.Option(
        None,
        "--settle-time",
        "-s",
        help="Ignore mark and panic levels for machines running less than this (seconds)",
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", "-f", help="Also append logs to this file"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level"),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format (for programmatic parsing)"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Validate config and panic preconditions without sampling"
    ),
    cycles: int | None = typer.Option(
        None, "--cycles", min=1, help="Stop after this many cycles (default: run forever)"
    ),
) -> None:
    """Sample vCPU usage every interval and classify it against the thresholds."""
    overrides: dict[str, Any] = {
        "interval_seconds": interval,
        "log_file": log_file,
        "log_level": log_level,
    }
    threshold_overrides: dict[str, Any] = {
        "print_level": print_level,
        "mark_level": mark_level,
        "panic_level": panic_level,
        "settle_seconds": settle_time,
    }

    try:
        monitor_config = _build_config(config, overrides, threshold_overrides)
    except (FileNotFoundError, ValueError, ValidationError, yaml.YAMLError) as e:
        console.print(f"[bold red]Error loading config: {escape(str(e))}[/]")
        raise typer.Exit(1) from e

    try:
        setup_logging(
            level=monitor_config.log_level,
            log_file=monitor_config.log_file,
            json_format=json_logs,
            rich_console=not json_logs,
        )
    except OSError as e:
        console.print(f"[bold red]Error opening log file: {escape(str(e))}[/]")
        raise typer.Exit(1) from e

    if monitor_config.thresholds.panic_enabled:
        try:
            check_panic_preconditions(monitor_config.sysrq_control_path)
        except PreconditionError as e:
            logger.critical(str(e))
            raise typer.Exit(1) from e

    _show_config_summary(monitor_config)

    if dry_run:
        console.print("[bold green]Configuration is valid![/]")
        return

    orchestrator = SamplingOrchestrator(
        monitor_config, SysrqTrigger(monitor_config.sysrq_trigger_path)
    )
    try:
        orchestrator.run(max_cycles=cycles)
    except DiscoveryError as e:
        logger.critical(str(e))
        raise typer.Exit(1) from e


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("vcpustat.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# vcpustat configuration

# Seconds between the two snapshots of each cycle
interval_seconds: 5

# Per-interval CPU time thresholds in nanoseconds (null or -1 disables a tier)
thresholds:
  # Only print vCPUs that used this much CPU time or less
  print_level: null
  # Tag vCPUs at or below this with (WARN)
  mark_level: 1000000
  # Crash the host through SysRq for vCPUs at or below this (requires root
  # and kernel.sysrq = 1)
  panic_level: null
  # Machines younger than this never get WARN or PANIC tags
  settle_seconds: 120

# cgroup v1 cpuacct scopes created by libvirt, one per machine
machine_pattern: "/sys/fs/cgroup/cpuacct/machine.slice/machine-qemu*.scope"

# Optional log file (appended to)
# log_file: /var/log/vcpustat.log
log_level: INFO
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(sample_config)
    console.print(f"[bold green]Sample configuration written to {output}[/]")


def _build_config(
    path: Path | None,
    overrides: dict[str, Any],
    threshold_overrides: dict[str, Any],
) -> MonitorConfig:
    """Load the config file (or defaults) and apply command-line overrides."""
    base = load_config(path) if path is not None else MonitorConfig()
    data = base.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    data["thresholds"].update({k: v for k, v in threshold_overrides.items() if v is not None})
    return MonitorConfig.model_validate(data)


def _level_text(level: int | None) -> str:
    return "disabled" if level is None else f"{level:,} ns"


def _show_config_summary(config: MonitorConfig) -> None:
    """Display a summary of the monitor configuration."""
    table = Table(title="vcpustat Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    thresholds = config.thresholds
    table.add_row("Interval", f"{config.interval_seconds} s")
    table.add_row("Print Level", _level_text(thresholds.print_level))
    table.add_row("Mark Level", _level_text(thresholds.mark_level))
    table.add_row("Panic Level", _level_text(thresholds.panic_level))
    table.add_row("Settle Time", f"{thresholds.settle_seconds} s")
    table.add_row("Machines", config.machine_pattern)
    table.add_row("Log File", str(config.log_file) if config.log_file else "-")

    console.print(table)


if __name__ == "__main__":
    app()
