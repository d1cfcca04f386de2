"""File logger plugin.

Appends one line per snapshot to a log file, between start and stop
banners. Writes from overlapping calls are serialized by a lock owned by
the plugin instance.
"""

import asyncio
import logging
import os
from typing import Optional

from sysmon.core.constants import DEFAULT_LOG_FILE_PATH
from sysmon.core.models import MetricsSnapshot, utc_now
from sysmon.core.plugin import ISinkPlugin

logger = logging.getLogger(__name__)

TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S"


def format_entry(snapshot: MetricsSnapshot) -> str:
    """Format a snapshot as a log file line (without newline)."""
    return f"{snapshot.captured_at:{TIMESTAMP_FMT}} | {snapshot.summary()}"


class FileLoggerPlugin(ISinkPlugin):
    """Appends snapshots to a text file."""

    name = "File Logger Plugin"

    def __init__(self, log_file_path: str = DEFAULT_LOG_FILE_PATH):
        if not log_file_path:
            raise ValueError("log_file_path must not be empty")
        self.log_file_path = log_file_path
        self._lock = asyncio.Lock()
        self._started = False

    async def initialize(self, stop_event: Optional[asyncio.Event] = None) -> None:
        directory = os.path.dirname(self.log_file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        await self._append(f"=== System Monitor Started at {utc_now():{TIMESTAMP_FMT}} UTC ===")
        self._started = True
        logger.info(f"File logger plugin initialized. Logging to: {self.log_file_path}")

    async def process(self, snapshot: MetricsSnapshot, stop_event: Optional[asyncio.Event] = None) -> None:
        await self._append(format_entry(snapshot))

    async def cleanup(self, stop_event: Optional[asyncio.Event] = None) -> None:
        if not self._started:
            logger.debug("File logger plugin was never started, nothing to close")
            return
        await self._append(f"=== System Monitor Stopped at {utc_now():{TIMESTAMP_FMT}} UTC ===")
        self._started = False
        logger.info("File logger plugin cleaned up")

    async def _append(self, line: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write_line, line)

    def _write_line(self, line: str) -> None:
        with open(self.log_file_path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
