"""Core module for the system monitor.

This module contains domain models, contracts, configuration, and constants.
"""

from sysmon.core.config import Settings
from sysmon.core.models import MetricsSnapshot
from sysmon.core.plugin import ISinkPlugin
from sysmon.core.provider import IMetricsProvider
from sysmon.core.exceptions import (
    SysmonError,
    UnsupportedPlatformError,
    SamplingError,
    SchedulerStateError,
    RegistryError,
)
from sysmon.core.constants import (
    DEFAULT_INTERVAL_SECONDS,
    CPU_SETTLE_SECONDS,
    BYTES_PER_MB,
)

__all__ = [
    "Settings",
    "MetricsSnapshot",
    "ISinkPlugin",
    "IMetricsProvider",
    "SysmonError",
    "UnsupportedPlatformError",
    "SamplingError",
    "SchedulerStateError",
    "RegistryError",
    "DEFAULT_INTERVAL_SECONDS",
    "CPU_SETTLE_SECONDS",
    "BYTES_PER_MB",
]
