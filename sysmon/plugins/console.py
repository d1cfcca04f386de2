"""Console output plugin.

Prints one line per snapshot, colored by CPU usage.
"""

import asyncio
import logging
from typing import Optional

from rich.console import Console

from sysmon.core.constants import CPU_CRITICAL_PCT, CPU_ELEVATED_PCT, CPU_HIGH_PCT
from sysmon.core.models import MetricsSnapshot
from sysmon.core.plugin import ISinkPlugin

logger = logging.getLogger(__name__)


def style_for_cpu(cpu_usage: float) -> str:
    """Map CPU usage to a rich style."""
    if cpu_usage >= CPU_CRITICAL_PCT:
        return "red"
    if cpu_usage >= CPU_HIGH_PCT:
        return "yellow"
    if cpu_usage >= CPU_ELEVATED_PCT:
        return "dark_orange"
    return "green"


class ConsoleOutputPlugin(ISinkPlugin):
    """Writes snapshots to the terminal."""

    name = "Console Output Plugin"

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    async def initialize(self, stop_event: Optional[asyncio.Event] = None) -> None:
        self.console.print()
        self.console.print("=== System Monitor Console Output Started ===", style="bold")
        self.console.print("Monitoring system resources...")
        self.console.print()
        logger.info("Console output plugin initialized")

    async def process(self, snapshot: MetricsSnapshot, stop_event: Optional[asyncio.Event] = None) -> None:
        # markup/highlight off so the bracketed timestamp prints verbatim
        self.console.print(
            snapshot.summary(),
            style=style_for_cpu(snapshot.cpu_usage_percent),
            markup=False,
            highlight=False,
        )

    async def cleanup(self, stop_event: Optional[asyncio.Event] = None) -> None:
        self.console.print()
        self.console.print("=== System Monitor Console Output Stopped ===", style="bold")
        logger.info("Console output plugin cleaned up")
