"""Main CLI application for the system monitor.

Usage:
    python -m sysmon.apps.main run [--interval SECONDS] [--api-endpoint URL]
    python -m sysmon.apps.main sample
    python -m sysmon.apps.main config-show
"""

import asyncio
import logging
import signal
import sys
from typing import Optional
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

from sysmon.core.config import Settings
from sysmon.core.exceptions import SysmonError
from sysmon.core.models import MetricsSnapshot
from sysmon.orchestration import MonitoringScheduler, PluginRegistry
from sysmon.plugins import build_plugins
from sysmon.providers import resolve_provider
from sysmon.utils.logging import setup_logging

logger = logging.getLogger(__name__)

app = typer.Typer(help="System Monitor CLI - sample host resources and publish them to sinks")
console = Console()


def _provider_options(settings: Settings) -> dict:
    return {"disk_path": settings.disk_path} if settings.disk_path else {}


@app.command(help="Run the monitor until Ctrl+C. Examples:\n  python -m sysmon.apps.main run --interval 2\n  python -m sysmon.apps.main run --api-endpoint http://localhost:8080/metrics --no-file")
def run(
    interval: Optional[float] = typer.Option(None, "--interval", "-i", help="Sampling interval in seconds"),
    api_endpoint: Optional[str] = typer.Option(None, "--api-endpoint", help="Remote API endpoint for the API publisher"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="File logger output path"),
    disk_path: Optional[str] = typer.Option(None, "--disk-path", help="Mount point or drive to measure"),
    no_console: bool = typer.Option(False, "--no-console", help="Disable console output"),
    no_file: bool = typer.Option(False, "--no-file", help="Disable file logging"),
    no_api: bool = typer.Option(False, "--no-api", help="Disable the API publisher"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level: DEBUG|INFO|WARNING|ERROR"),
):
    """Run the monitoring loop."""
    try:
        overrides = {}
        if interval is not None:
            overrides["interval_seconds"] = interval
        if api_endpoint is not None:
            overrides["api_endpoint"] = api_endpoint
        if log_file is not None:
            overrides["log_file_path"] = log_file
        if disk_path is not None:
            overrides["disk_path"] = disk_path
        if log_level is not None:
            overrides["log_level"] = log_level
        if no_console:
            overrides["enable_console_output"] = False
        if no_file:
            overrides["enable_file_logging"] = False
        if no_api:
            overrides["enable_api_publisher"] = False
        # Init kwargs take priority over environment variables and .env
        settings = Settings(**overrides)
    except ValidationError as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        sys.exit(1)

    setup_logging(settings=settings)

    console.print(Panel.fit("Cross-Platform System Monitor", style="bold green"))

    try:
        asyncio.run(_run_monitor(settings))
    except KeyboardInterrupt:
        console.print("\n[yellow]Monitor stopped by user[/yellow]")
    except SysmonError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Fatal error: {escape(str(e))}[/red]")
        logger.exception("Error running monitor")
        sys.exit(1)


@app.command(help="Take a single snapshot and print it.")
def sample(
    disk_path: Optional[str] = typer.Option(None, "--disk-path", help="Mount point or drive to measure"),
):
    """Print one snapshot as a table."""
    setup_logging(level=logging.WARNING)
    try:
        settings = Settings.from_env()
        options = {"disk_path": disk_path} if disk_path else _provider_options(settings)
        provider = resolve_provider(**options)
        snapshot = asyncio.run(provider.sample())
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        logger.exception("Sample error")
        sys.exit(1)

    console.print(_snapshot_table(snapshot))


@app.command(help="Show effective configuration (after environment overrides).")
def config_show():
    try:
        settings = Settings.from_env()
        table = Table(title="Effective Configuration", show_header=True)
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="magenta")
        table.add_row("Interval (s)", str(settings.interval_seconds))
        table.add_row("Disk Path", settings.disk_path or "(platform default)")
        table.add_row("Console Output", "Yes" if settings.enable_console_output else "No")
        table.add_row("File Logging", "Yes" if settings.enable_file_logging else "No")
        table.add_row("Log File", settings.log_file_path)
        table.add_row("API Publisher", "Yes" if settings.enable_api_publisher else "No")
        table.add_row("API Endpoint", settings.api_endpoint or "(not set)")
        table.add_row("API Timeout (s)", str(settings.api_timeout_seconds))
        table.add_row("Log Level", settings.log_level)
        console.print(table)
    except Exception as e:
        console.print(f"[red]Error showing config: {e}[/red]")
        logger.exception("Config show error")
        sys.exit(1)


async def _run_monitor(settings: Settings) -> None:
    """Wire provider, plugins and scheduler, and run until a stop signal."""
    provider = resolve_provider(**_provider_options(settings))

    registry = PluginRegistry()
    for plugin in build_plugins(settings):
        registry.register(plugin)

    scheduler = MonitoringScheduler(provider, registry, settings.interval_seconds)
    stop_event = asyncio.Event()
    _install_signal_handlers(stop_event)

    console.print(f"[green]Monitoring every {settings.interval_seconds}s with {len(registry)} plugin(s). Press Ctrl+C to stop.[/green]")
    await scheduler.run(stop_event)
    console.print(f"[green]Monitor stopped after {scheduler.tick_count} tick(s)[/green]")


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_stop, stop_event)
        except (NotImplementedError, RuntimeError):
            # Windows event loops: Ctrl+C surfaces as KeyboardInterrupt instead
            logger.debug(f"Signal handler for {sig.name} not supported on this platform")


def _request_stop(stop_event: asyncio.Event) -> None:
    if not stop_event.is_set():
        console.print("\n[yellow]Stop requested. Stopping gracefully...[/yellow]")
        stop_event.set()


def _snapshot_table(snapshot: MetricsSnapshot) -> Table:
    table = Table(title="System Snapshot", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("Captured At", f"{snapshot.captured_at:%Y-%m-%d %H:%M:%S} UTC")
    table.add_row("CPU", f"{snapshot.cpu_usage_percent:.1f}%")
    table.add_row("RAM", f"{snapshot.ram_used_mb:,}/{snapshot.ram_total_mb:,} MB ({snapshot.ram_percent:.1f}%)")
    table.add_row("Disk", f"{snapshot.disk_used_mb:,}/{snapshot.disk_total_mb:,} MB ({snapshot.disk_percent:.1f}%)")
    return table


if __name__ == "__main__":
    app()
