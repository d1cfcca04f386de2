"""Domain models for the system monitor.

Snapshots are immutable and use Pydantic for validation.
"""

from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, model_validator

from sysmon.core.constants import BYTES_PER_MB


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def _percentage(used: int, total: int) -> float:
    return used / total * 100 if total > 0 else 0.0


class MetricsSnapshot(BaseModel):
    """One measurement of host resource usage at a point in time."""

    model_config = ConfigDict(frozen=True)

    cpu_usage_percent: float = Field(0.0, ge=0.0, le=100.0, description="CPU usage (0-100)")
    ram_used_bytes: int = Field(0, ge=0, description="Used physical memory in bytes")
    ram_total_bytes: int = Field(0, ge=0, description="Total physical memory in bytes")
    disk_used_bytes: int = Field(0, ge=0, description="Used disk space in bytes")
    disk_total_bytes: int = Field(0, ge=0, description="Total disk space in bytes")
    captured_at: datetime = Field(default_factory=utc_now, description="Capture time (UTC)")

    @model_validator(mode="after")
    def check_used_within_total(self) -> "MetricsSnapshot":
        """Reject snapshots where a used value exceeds its non-zero total."""
        if self.ram_total_bytes > 0 and self.ram_used_bytes > self.ram_total_bytes:
            raise ValueError(
                f"ram_used_bytes ({self.ram_used_bytes}) exceeds ram_total_bytes ({self.ram_total_bytes})"
            )
        if self.disk_total_bytes > 0 and self.disk_used_bytes > self.disk_total_bytes:
            raise ValueError(
                f"disk_used_bytes ({self.disk_used_bytes}) exceeds disk_total_bytes ({self.disk_total_bytes})"
            )
        return self

    @property
    def ram_used_mb(self) -> int:
        return self.ram_used_bytes // BYTES_PER_MB

    @property
    def ram_total_mb(self) -> int:
        return self.ram_total_bytes // BYTES_PER_MB

    @property
    def disk_used_mb(self) -> int:
        return self.disk_used_bytes // BYTES_PER_MB

    @property
    def disk_total_mb(self) -> int:
        return self.disk_total_bytes // BYTES_PER_MB

    @property
    def ram_percent(self) -> float:
        """Memory usage as a percentage of total (0 if total unknown)."""
        return _percentage(self.ram_used_bytes, self.ram_total_bytes)

    @property
    def disk_percent(self) -> float:
        """Disk usage as a percentage of total (0 if total unknown)."""
        return _percentage(self.disk_used_bytes, self.disk_total_bytes)

    def summary(self) -> str:
        """Render a single human-readable line for this snapshot."""
        return (
            f"[{self.captured_at:%Y-%m-%d %H:%M:%S}] CPU: {self.cpu_usage_percent:.1f}% | "
            f"RAM: {self.ram_used_mb:,}/{self.ram_total_mb:,} MB ({self.ram_percent:.1f}%) | "
            f"Disk: {self.disk_used_mb:,}/{self.disk_total_mb:,} MB ({self.disk_percent:.1f}%)"
        )

    def __str__(self) -> str:
        return self.summary()
