"""psutil-backed metrics provider.

Each metric family (CPU, memory, disk) is collected independently: a failing
family is logged and reported as zeros, and only a sample where every family
fails is an error.
"""

import asyncio
import logging
from abc import abstractmethod
from typing import Optional

import psutil

from sysmon.core.constants import CPU_SETTLE_SECONDS
from sysmon.core.exceptions import SamplingError
from sysmon.core.models import MetricsSnapshot, utc_now
from sysmon.core.provider import IMetricsProvider

logger = logging.getLogger(__name__)


def _clamp_used(used: int, total: int) -> int:
    """Clamp a used value into [0, total]."""
    return max(0, min(int(used), int(total)))


class PsutilMetricsProvider(IMetricsProvider):
    """Base provider reading host counters through psutil.

    Subclasses only decide which disk volume to measure.
    """

    platform_name = "generic"

    def __init__(self, cpu_settle_seconds: float = CPU_SETTLE_SECONDS):
        """Initialize provider.

        Args:
            cpu_settle_seconds: Settle delay between the two CPU counter reads
        """
        if cpu_settle_seconds <= 0:
            raise ValueError("cpu_settle_seconds must be greater than zero")
        self.cpu_settle_seconds = cpu_settle_seconds

    async def sample(self) -> MetricsSnapshot:
        """Take one snapshot. Blocking reads run in a worker thread."""
        return await asyncio.to_thread(self._sample_blocking)

    def _sample_blocking(self) -> MetricsSnapshot:
        captured_at = utc_now()
        failures = 0

        try:
            cpu = self._read_cpu()
        except Exception as e:
            logger.error(f"Error getting CPU usage: {e}")
            cpu, failures = 0.0, failures + 1

        try:
            ram_used, ram_total = self._read_memory()
        except Exception as e:
            logger.error(f"Error getting memory usage: {e}")
            ram_used, ram_total, failures = 0, 0, failures + 1

        try:
            disk_used, disk_total = self._read_disk()
        except Exception as e:
            logger.error(f"Error getting disk usage: {e}")
            disk_used, disk_total, failures = 0, 0, failures + 1

        if failures == 3:
            raise SamplingError(f"Could not read any metric on {self.platform_name}")

        return MetricsSnapshot(
            cpu_usage_percent=cpu,
            ram_used_bytes=ram_used,
            ram_total_bytes=ram_total,
            disk_used_bytes=disk_used,
            disk_total_bytes=disk_total,
            captured_at=captured_at,
        )

    def _read_cpu(self) -> float:
        # Blocks for the settle delay so two counter reads can be compared
        value = psutil.cpu_percent(interval=self.cpu_settle_seconds)
        return round(min(max(float(value), 0.0), 100.0), 2)

    def _read_memory(self) -> tuple[int, int]:
        vm = psutil.virtual_memory()
        total = int(vm.total)
        return _clamp_used(total - int(vm.available), total), total

    def _read_disk(self) -> tuple[int, int]:
        path = self.resolve_disk_path()
        if path is None:
            return 0, 0
        usage = psutil.disk_usage(path)
        total = int(usage.total)
        return _clamp_used(total - int(usage.free), total), total

    @abstractmethod
    def resolve_disk_path(self) -> Optional[str]:
        """Return the mount point or drive to measure, or None if there is none."""
        pass
