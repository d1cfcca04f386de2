"""Metrics provider for Windows hosts."""

import logging
from typing import Optional

import psutil

from sysmon.core.constants import CPU_SETTLE_SECONDS, DEFAULT_WINDOWS_DRIVE
from sysmon.providers.base import PsutilMetricsProvider

logger = logging.getLogger(__name__)


class WindowsMetricsProvider(PsutilMetricsProvider):
    """Measures the system drive (C: when present) among fixed, ready drives."""

    platform_name = "windows"

    def __init__(self, disk_path: Optional[str] = None, cpu_settle_seconds: float = CPU_SETTLE_SECONDS):
        super().__init__(cpu_settle_seconds=cpu_settle_seconds)
        self.disk_path = disk_path

    def resolve_disk_path(self) -> Optional[str]:
        if self.disk_path:
            return self.disk_path

        drives = [p.mountpoint for p in psutil.disk_partitions(all=False) if self._is_ready_fixed(p)]
        if not drives:
            logger.warning("No ready fixed drives found")
            return None

        for mountpoint in drives:
            if mountpoint.upper().startswith(DEFAULT_WINDOWS_DRIVE):
                return mountpoint
        return drives[0]

    @staticmethod
    def _is_ready_fixed(partition) -> bool:
        opts = {opt.strip().lower() for opt in partition.opts.split(",")}
        if "fixed" not in opts:
            return False
        # Unmounted or not-ready drives report no filesystem type
        return bool(partition.fstype)
