"""Metrics provider for POSIX hosts (Linux, macOS)."""

from typing import Optional

from sysmon.core.constants import CPU_SETTLE_SECONDS, DEFAULT_POSIX_DISK_PATH
from sysmon.providers.base import PsutilMetricsProvider


class PosixMetricsProvider(PsutilMetricsProvider):
    """Measures a single mount point, the root filesystem by default."""

    platform_name = "posix"

    def __init__(self, disk_path: Optional[str] = None, cpu_settle_seconds: float = CPU_SETTLE_SECONDS):
        super().__init__(cpu_settle_seconds=cpu_settle_seconds)
        self.disk_path = disk_path or DEFAULT_POSIX_DISK_PATH

    def resolve_disk_path(self) -> Optional[str]:
        return self.disk_path
